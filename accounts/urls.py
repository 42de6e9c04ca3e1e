from django.urls import path
from .views import (
    LoginView, MeView, PasswordChangeView,
    UserListCreateView, UserDetailView,
)

auth_urlpatterns = [
    path('login/', LoginView.as_view(), name="login"),
    path('me/', MeView.as_view(), name="me"),
    path('password/', PasswordChangeView.as_view(), name="password-change"),
]

user_urlpatterns = [
    path('', UserListCreateView.as_view(), name="user-list"),
    path('<int:pk>/', UserDetailView.as_view(), name="user-detail"),
]
