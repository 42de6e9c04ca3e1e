from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from .serializers import EvaluationSerializer, EvaluationSubmitSerializer
from .services import EvaluationService


error_400 = openapi.Response(
    description="Bad Request",
    examples={"application/json": {"error": "too_early", "detail": "Cannot evaluate Ivy before their internship ends on Dec. 31, 2025."}}
)
error_403 = openapi.Response(
    description="Forbidden",
    examples={"application/json": {"error": "not_your_intern", "detail": "You can only evaluate interns you supervise."}}
)
error_404 = openapi.Response(
    description="Not Found",
    examples={"application/json": {"error": "not_found", "detail": "No evaluation found."}}
)
error_409 = openapi.Response(
    description="Conflict",
    examples={"application/json": {"error": "already_evaluated", "detail": "This intern has already been evaluated by you."}}
)

TAGS = ["Evaluations"]


class EvaluationListCreateView(APIView):
    """
    GET: evaluations submitted by the calling supervisor.
    POST: evaluate one of the supervisor's interns once the internship has ended.
    """

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="List submitted evaluations (supervisors)",
        operation_id="evaluation_list_supervised",
        responses={200: EvaluationSerializer(many=True), 403: error_403}
    )
    def get(self, request):
        evaluations = EvaluationService().list_supervised(request.user)
        return Response(EvaluationSerializer(evaluations, many=True).data)

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Submit an evaluation (supervisors)",
        operation_id="evaluation_submit",
        request_body=EvaluationSubmitSerializer,
        responses={201: EvaluationSerializer, 400: error_400, 403: error_403, 404: error_404, 409: error_409}
    )
    def post(self, request):
        serializer = EvaluationSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        evaluation = EvaluationService().submit(request.user, serializer.to_request())
        return Response(EvaluationSerializer(evaluation).data, status=status.HTTP_201_CREATED)


class MyEvaluationView(APIView):
    """The calling intern's most recent evaluation."""

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Get my evaluation (interns)",
        operation_id="evaluation_own",
        responses={200: EvaluationSerializer, 403: error_403, 404: error_404}
    )
    def get(self, request):
        evaluation = EvaluationService().get_own(request.user)
        return Response(EvaluationSerializer(evaluation).data)
