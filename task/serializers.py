from rest_framework import serializers

from .models import Task, Priority
from .services import NewTask, TaskChanges


class PersonNameSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    full_name = serializers.CharField()


class TaskSerializer(serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)
    supervisor_id = serializers.IntegerField(read_only=True)
    intern_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Task
        fields = [
            "id",
            "company_id",
            "supervisor_id",
            "intern_id",
            "title",
            "description",
            "priority",
            "category",
            "due_date",
            "status",
            "created_at",
        ]
        read_only_fields = fields


class TaskDetailSerializer(TaskSerializer):
    """Task with the names of both people involved (task detail / lists)."""

    supervisor = PersonNameSerializer(read_only=True)
    intern = PersonNameSerializer(read_only=True)

    class Meta(TaskSerializer.Meta):
        fields = TaskSerializer.Meta.fields + ["supervisor", "intern"]
        read_only_fields = fields


class TaskCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    priority = serializers.ChoiceField(choices=Priority.choices)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    intern_id = serializers.IntegerField()

    def to_request(self):
        data = {name: value for name, value in self.validated_data.items() if value not in ("", None)}
        return NewTask(**data)


class TaskUpdateSerializer(serializers.Serializer):
    """
    Any subset of the task fields. Which of them are applied depends on the
    caller: the assigned intern may only change `status`.
    Empty values are ignored.
    """

    status = serializers.CharField(max_length=30, required=False, allow_blank=True)
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    priority = serializers.ChoiceField(choices=Priority.choices, required=False)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    intern_id = serializers.IntegerField(required=False, allow_null=True)

    def to_request(self):
        data = {name: value for name, value in self.validated_data.items() if value not in ("", None)}
        return TaskChanges(**data)
