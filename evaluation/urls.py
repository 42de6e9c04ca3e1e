from django.urls import path
from .views import EvaluationListCreateView, MyEvaluationView

urlpatterns = [
    path("", EvaluationListCreateView.as_view(), name="evaluation-list"),
    path("me/", MyEvaluationView.as_view(), name="evaluation-own"),
]
