from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from django_filters.rest_framework import DjangoFilterBackend

from .filters import TaskFilter
from .serializers import (
    TaskCreateSerializer,
    TaskDetailSerializer,
    TaskSerializer,
    TaskUpdateSerializer,
)
from .services import TaskService


# ===========================
# REUSABLE SCHEMAS & RESPONSES
# ===========================
error_400 = openapi.Response(
    description="Bad Request",
    examples={"application/json": {"error": "no_valid_fields", "detail": "No valid update fields provided."}}
)
error_403 = openapi.Response(
    description="Forbidden",
    examples={"application/json": {"error": "forbidden", "detail": "Forbidden: Only Supervisors can create tasks.", "reason": "wrong_role"}}
)
error_404 = openapi.Response(
    description="Not Found",
    examples={"application/json": {"error": "not_found", "detail": "Task not found."}}
)

filter_params = [
    openapi.Parameter("status", openapi.IN_QUERY, type=openapi.TYPE_STRING, description="Workflow status (case-insensitive)"),
    openapi.Parameter("priority", openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=["LOW", "MEDIUM", "HIGH"]),
    openapi.Parameter("intern", openapi.IN_QUERY, type=openapi.TYPE_INTEGER, description="Assigned intern id"),
    openapi.Parameter("due_before", openapi.IN_QUERY, type=openapi.TYPE_STRING, format=openapi.FORMAT_DATETIME),
]

TAGS = ["Tasks"]


class FilteredTaskListMixin:
    filter_backends = [DjangoFilterBackend]
    filterset_class = TaskFilter

    def filter_queryset(self, queryset):
        for backend in self.filter_backends:
            queryset = backend().filter_queryset(self.request, queryset, self)
        return queryset


# ===========================
# INTERN TASKS + CREATE
# ===========================
class TaskListCreateView(FilteredTaskListMixin, APIView):
    """
    GET: the calling intern's tasks, newest first.
    POST: a supervisor assigns a new task to one of the company's interns.
    """

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="List my tasks (interns)",
        operation_id="task_list_assigned",
        manual_parameters=filter_params,
        responses={200: TaskDetailSerializer(many=True), 403: error_403}
    )
    def get(self, request):
        tasks = self.filter_queryset(TaskService().list_assigned(request.user))
        return Response(TaskDetailSerializer(tasks, many=True).data)

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Create a task (supervisors)",
        operation_id="task_create",
        request_body=TaskCreateSerializer,
        responses={201: TaskSerializer, 400: error_400, 403: error_403}
    )
    def post(self, request):
        serializer = TaskCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = TaskService().create(request.user, serializer.to_request())
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


# ===========================
# SUPERVISED TASKS
# ===========================
class SupervisedTaskListView(FilteredTaskListMixin, APIView):
    """Tasks created by the calling supervisor, with the assignee's name."""

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="List supervised tasks (supervisors)",
        operation_id="task_list_supervised",
        manual_parameters=filter_params,
        responses={200: TaskDetailSerializer(many=True), 403: error_403}
    )
    def get(self, request):
        tasks = self.filter_queryset(TaskService().list_supervised(request.user))
        return Response(TaskDetailSerializer(tasks, many=True).data)


# ===========================
# SINGLE TASK
# ===========================
class TaskDetailView(APIView):
    """
    Retrieve, update or delete one task.

    - View: any Admin, the assigned intern, or the creating supervisor.
    - Update: the intern may change `status` only (other fields are dropped);
      the creating supervisor or any Admin may change every field.
    - Delete: the creating supervisor only.
    """

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Get task detail",
        operation_id="task_retrieve",
        responses={200: TaskDetailSerializer, 403: error_403, 404: error_404}
    )
    def get(self, request, pk):
        task = TaskService().get(request.user, pk)
        return Response(TaskDetailSerializer(task).data)

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Update a task",
        operation_id="task_update",
        request_body=TaskUpdateSerializer,
        responses={200: TaskSerializer, 400: error_400, 403: error_403, 404: error_404}
    )
    def put(self, request, pk):
        return self._update(request, pk)

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Partially update a task",
        operation_id="task_partial_update",
        request_body=TaskUpdateSerializer,
        responses={200: TaskSerializer, 400: error_400, 403: error_403, 404: error_404}
    )
    def patch(self, request, pk):
        return self._update(request, pk)

    def _update(self, request, pk):
        serializer = TaskUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = TaskService().update(request.user, pk, serializer.to_request())
        return Response(TaskSerializer(task).data)

    @swagger_auto_schema(
        tags=TAGS,
        operation_summary="Delete a task",
        operation_id="task_delete",
        responses={204: "Deleted", 403: error_403, 404: error_404}
    )
    def delete(self, request, pk):
        TaskService().delete(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
