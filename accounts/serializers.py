from rest_framework import serializers

from .models import User, Role
from .services import NewUser, AssignmentChanges


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)


class UserContactSerializer(serializers.ModelSerializer):

    class Meta:
        model = User
        fields = ["id", "full_name", "email"]


class UserSummarySerializer(serializers.ModelSerializer):
    supervisor_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = User
        fields = [
            "id",
            "full_name",
            "email",
            "role",
            "domain",
            "start_date",
            "end_date",
            "supervisor_id",
            "created_at",
        ]
        read_only_fields = fields


class UserProfileSerializer(UserSummarySerializer):
    """
    Single-user view. Interns see who supervises them; supervisors see
    their interns.
    """

    company_id = serializers.IntegerField(read_only=True)
    supervisor = UserContactSerializer(read_only=True)
    supervisees = UserContactSerializer(many=True, read_only=True)

    class Meta(UserSummarySerializer.Meta):
        fields = UserSummarySerializer.Meta.fields + ["company_id", "supervisor", "supervisees"]
        read_only_fields = fields


class UserCreateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=Role.choices)

    # Kept only for interns
    domain = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    start_date = serializers.DateTimeField(required=False, allow_null=True)
    end_date = serializers.DateTimeField(required=False, allow_null=True)
    supervisor_id = serializers.IntegerField(required=False, allow_null=True)

    def to_request(self):
        data = dict(self.validated_data)
        data["role"] = Role(data["role"])
        if not data.get("domain"):
            data["domain"] = None
        return NewUser(**data)


class AssignmentUpdateSerializer(serializers.Serializer):
    domain = serializers.CharField(max_length=100, required=False)
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)
    supervisor_id = serializers.IntegerField(required=False)

    def to_request(self):
        return AssignmentChanges(**self.validated_data)
