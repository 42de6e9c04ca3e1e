from django.urls import path
from .views import (
    CompanyRegisterView,
    CompanyProfileView,
    EnrollmentStatisticsView,
    DomainStatisticsView,
)

urlpatterns = [
    # -----------------------------------------------------
    # AUTH
    # -----------------------------------------------------
    path("register/", CompanyRegisterView.as_view(), name="company-register"),

    # -----------------------------------------------------
    # PROFILE
    # -----------------------------------------------------
    path("", CompanyProfileView.as_view(), name="company-profile"),

    # -----------------------------------------------------
    # DASHBOARD
    # -----------------------------------------------------
    path("stats/enrollment/", EnrollmentStatisticsView.as_view(), name="company-stats-enrollment"),
    path("stats/domains/", DomainStatisticsView.as_view(), name="company-stats-domains"),
]
