from rest_framework import serializers

from .models import Evaluation
from .services import EvaluationSubmission


class EvaluationSerializer(serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)
    supervisor_id = serializers.IntegerField(read_only=True)
    intern_id = serializers.IntegerField(read_only=True)
    supervisor_name = serializers.CharField(source="supervisor.full_name", read_only=True)
    intern_name = serializers.CharField(source="intern.full_name", read_only=True)

    class Meta:
        model = Evaluation
        fields = [
            "id",
            "company_id",
            "supervisor_id",
            "supervisor_name",
            "intern_id",
            "intern_name",
            "technical_score",
            "communication_score",
            "teamwork_score",
            "comments",
            "submitted_at",
        ]
        read_only_fields = fields


class EvaluationSubmitSerializer(serializers.Serializer):
    intern_id = serializers.IntegerField()
    technical_score = serializers.IntegerField(min_value=1, max_value=5)
    communication_score = serializers.IntegerField(min_value=1, max_value=5)
    teamwork_score = serializers.IntegerField(min_value=1, max_value=5)
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_request(self):
        data = dict(self.validated_data)
        data["comments"] = data.get("comments") or None
        return EvaluationSubmission(**data)
