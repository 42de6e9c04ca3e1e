from django.urls import path, include, re_path
from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

from accounts.urls import auth_urlpatterns, user_urlpatterns
from task.views import SupervisedTaskListView


schema_view = get_schema_view(
   openapi.Info(
      title="Interneefy (Internship Management)",
      default_version='v1',
      description="API documentation for the Interneefy internship management backend",
   ),
   public=True,
   permission_classes=(permissions.AllowAny,),
   authentication_classes=[],
)


urlpatterns = [
    path('api/auth/', include(auth_urlpatterns)),
    path('api/users/', include(user_urlpatterns)),
    path('api/company/', include('company.urls')),
    path('api/tasks/', include('task.urls')),
    path('api/supervision/tasks/', SupervisedTaskListView.as_view(), name='supervised-task-list'),
    path('api/evaluations/', include('evaluation.urls')),

    #Swagger/OpenAPI docs
    re_path(r'^api/docs/swagger(?P<format>\.json|\.yaml)$', schema_view.without_ui(cache_timeout=0), name='schema-json'),
    path('api/docs/swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('api/docs/redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
