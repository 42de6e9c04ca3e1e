from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from .serializers import (
    CompanyRegisterSerializer,
    CompanyRegisteredSerializer,
    CompanySerializer,
    CompanyUpdateSerializer,
    DomainStatSerializer,
    EnrollmentStatSerializer,
)
from .services import CompanyService


# Error responses
error_400 = openapi.Response(
    description="Bad Request",
    examples={"application/json": {"error": "validation_failed", "detail": "This email is already registered.", "field": "email"}}
)
error_403 = openapi.Response(
    description="Forbidden",
    examples={"application/json": {"error": "forbidden", "detail": "Forbidden: Only Admins can update the company profile.", "reason": "wrong_role"}}
)
error_404 = openapi.Response(
    description="Not Found",
    examples={"application/json": {"error": "not_found", "detail": "Company not found."}}
)

TAGS = ["Companies"]


# Company registration
class CompanyRegisterView(APIView):
    """
    Register a new company account.
    Creates the Company and its founding Admin user in one transaction.
    The admin then logs in through /api/auth/login/.
    """
    authentication_classes = []  # Public endpoint
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Register a new company",
        operation_id="company_register",
        request_body=CompanyRegisterSerializer,
        responses={
            201: openapi.Response(
                description="Company and Admin created",
                schema=CompanyRegisteredSerializer
            ),
            400: error_400,
        }
    )
    def post(self, request):
        serializer = CompanyRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        company, admin = CompanyService().register(serializer.to_request())

        response_data = {
            "message": "Company and Admin created!",
            **CompanyRegisteredSerializer({"company": company, "admin": admin}).data,
        }
        return Response(response_data, status=status.HTTP_201_CREATED)


# Company profile (GET + UPDATE)
class CompanyProfileView(APIView):
    """
    Retrieve or update the caller's company.
    Any member may read it; only Admins may change the name or logo.
    """

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Get company profile",
        operation_id="company_profile_retrieve",
        responses={
            200: CompanySerializer,
            404: error_404,
        }
    )
    def get(self, request):
        company = CompanyService().get(request.user)
        return Response(CompanySerializer(company).data)

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Update company profile",
        operation_id="company_profile_update",
        request_body=CompanyUpdateSerializer,
        responses={
            200: CompanySerializer,
            400: error_400,
            403: error_403,
        }
    )
    def put(self, request):
        return self._update_profile(request)

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Update company profile",
        operation_id="company_profile_partial_update",
        request_body=CompanyUpdateSerializer,
        responses={
            200: CompanySerializer,
            400: error_400,
            403: error_403,
        }
    )
    def patch(self, request):
        return self._update_profile(request)

    def _update_profile(self, request):
        serializer = CompanyUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        company = CompanyService().update(request.user, serializer.to_request())
        return Response(CompanySerializer(company).data)


class EnrollmentStatisticsView(APIView):
    """Interns enrolled per month over the last six months (Admins only)."""

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Monthly intern enrollment",
        operation_id="company_stats_enrollment",
        responses={200: EnrollmentStatSerializer(many=True), 403: error_403}
    )
    def get(self, request):
        stats = CompanyService().enrollment_statistics(request.user)
        return Response(EnrollmentStatSerializer(stats, many=True).data)


class DomainStatisticsView(APIView):
    """Interns per domain, or per supervisor when no domain is set (Admins only)."""

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Interns by domain",
        operation_id="company_stats_domains",
        responses={200: DomainStatSerializer(many=True), 403: error_403}
    )
    def get(self, request):
        stats = CompanyService().domain_statistics(request.user)
        return Response(DomainStatSerializer(stats, many=True).data)
