from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions

from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from .serializers import (
    AssignmentUpdateSerializer,
    LoginSerializer,
    PasswordChangeSerializer,
    UserCreateSerializer,
    UserProfileSerializer,
    UserSummarySerializer,
)
from .services import UserService


# ============================================================
# COMMON SCHEMAS
# ============================================================

ROLE_ENUM = openapi.Schema(
    type=openapi.TYPE_STRING,
    description="System user role",
    enum=["ADMIN", "SUPERVISOR", "INTERN"]
)

error_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        "error": openapi.Schema(type=openapi.TYPE_STRING, description="Stable failure kind"),
        "detail": openapi.Schema(type=openapi.TYPE_STRING),
        "reason": openapi.Schema(type=openapi.TYPE_STRING),
    }
)

error_400 = openapi.Response(
    description="Bad Request – validation error",
    schema=error_schema,
    examples={"application/json": {"error": "validation_failed", "detail": "supervisor_id must refer to a supervisor in your company."}}
)
error_401 = openapi.Response(
    description="Unauthorized – missing, invalid or expired token, or wrong password",
    schema=error_schema,
    examples={"application/json": {"error": "invalid_credentials", "detail": "Invalid password."}}
)
error_403 = openapi.Response(
    description="Forbidden – role or relationship does not allow this action",
    schema=error_schema,
    examples={"application/json": {"error": "forbidden", "detail": "Forbidden: Only Admins can add users.", "reason": "wrong_role"}}
)
error_404 = openapi.Response(
    description="Not Found",
    schema=error_schema,
    examples={"application/json": {"error": "not_found", "detail": "User not found."}}
)
error_409 = openapi.Response(
    description="Conflict – duplicate email or dependent records",
    schema=error_schema,
    examples={"application/json": {"error": "duplicate_email", "detail": "A user with this email already exists."}}
)

login_response_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    description="Successful authentication response",
    properties={
        "message": openapi.Schema(type=openapi.TYPE_STRING, example="Login successful!"),
        "token": openapi.Schema(type=openapi.TYPE_STRING, description="Bearer token valid for 24 hours"),
        "role": ROLE_ENUM,
        "user": openapi.Schema(type=openapi.TYPE_OBJECT, description="UserSummary of the logged-in user"),
    }
)

claims_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        "user_id": openapi.Schema(type=openapi.TYPE_INTEGER),
        "company_id": openapi.Schema(type=openapi.TYPE_INTEGER),
        "role": ROLE_ENUM,
        "full_name": openapi.Schema(type=openapi.TYPE_STRING),
    }
)

AUTH_TAGS = ["Authentication"]
USER_TAGS = ["Users"]


# ============================================================
# LOGIN
# ============================================================

class LoginView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        tags=AUTH_TAGS,
        operation_summary="Authenticate user",
        operation_description="Authenticates a user by email and password and returns a 24h bearer token.",
        operation_id="auth_login",
        request_body=LoginSerializer,
        responses={
            200: openapi.Response("Login successful", login_response_schema),
            401: error_401,
            404: error_404,
        }
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = UserService().login(**serializer.validated_data)

        return Response({
            "message": "Login successful!",
            "token": result.token,
            "role": result.role,
            "user": UserSummarySerializer(result.user).data,
        }, status=status.HTTP_200_OK)


# ============================================================
# CURRENT SESSION
# ============================================================

class MeView(APIView):
    """Echo the claims of the bearer token used for this request."""

    @swagger_auto_schema(
        tags=AUTH_TAGS,
        operation_summary="Current session",
        operation_id="auth_me",
        responses={200: openapi.Response("Session claims", claims_schema), 401: error_401}
    )
    def get(self, request):
        return Response(request.user.to_claims())


class PasswordChangeView(APIView):

    @swagger_auto_schema(
        tags=AUTH_TAGS,
        operation_summary="Change my password",
        operation_id="auth_password_change",
        request_body=PasswordChangeSerializer,
        responses={204: "Password changed", 400: error_400, 401: error_401}
    )
    def post(self, request):
        serializer = PasswordChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        UserService().change_password(
            request.user,
            serializer.validated_data["current_password"],
            serializer.validated_data["new_password"],
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


# ============================================================
# USERS
# ============================================================

class UserListCreateView(APIView):
    """
    List the users of the caller's company (Admins and Supervisors) or
    add a new user (Admins only).

    A new user never chooses a password: one is generated and mailed to
    them. `domain`, `start_date`, `end_date` and `supervisor_id` are kept
    only for interns.
    """

    @swagger_auto_schema(
        tags=USER_TAGS,
        operation_summary="List company users",
        operation_id="user_list",
        responses={200: UserSummarySerializer(many=True), 403: error_403}
    )
    def get(self, request):
        users = UserService().list(request.user)
        return Response(UserSummarySerializer(users, many=True).data)

    @swagger_auto_schema(
        tags=USER_TAGS,
        operation_summary="Add a user",
        operation_id="user_create",
        request_body=UserCreateSerializer,
        responses={201: UserSummarySerializer, 400: error_400, 403: error_403, 409: error_409}
    )
    def post(self, request):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService().create(request.user, serializer.to_request())
        return Response(UserSummarySerializer(user).data, status=status.HTTP_201_CREATED)


class UserDetailView(APIView):

    @swagger_auto_schema(
        tags=USER_TAGS,
        operation_summary="Get a user profile",
        operation_description="Interns may only view themselves; Admins and Supervisors may view anyone in their company.",
        operation_id="user_retrieve",
        responses={200: UserProfileSerializer, 403: error_403, 404: error_404}
    )
    def get(self, request, pk):
        user = UserService().get(request.user, pk)
        return Response(UserProfileSerializer(user).data)

    @swagger_auto_schema(
        tags=USER_TAGS,
        operation_summary="Change an intern's assignment",
        operation_description="Admins only. Updates domain, dates or supervisor of an intern. Roles never change.",
        operation_id="user_partial_update",
        request_body=AssignmentUpdateSerializer,
        responses={200: UserProfileSerializer, 400: error_400, 403: error_403, 404: error_404}
    )
    def patch(self, request, pk):
        serializer = AssignmentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService().update_assignment(request.user, pk, serializer.to_request())
        return Response(UserProfileSerializer(user).data)

    @swagger_auto_schema(
        tags=USER_TAGS,
        operation_summary="Delete a user",
        operation_description="Admins only, never themselves. Users that still have tasks or evaluations cannot be deleted.",
        operation_id="user_delete",
        responses={204: "Deleted", 403: error_403, 404: error_404, 409: error_409}
    )
    def delete(self, request, pk):
        UserService().delete(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
