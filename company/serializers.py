from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Company
from .services import CompanyRegistration, CompanyChanges


class CompanySerializer(serializers.ModelSerializer):

    class Meta:
        model = Company
        fields = ["id", "name", "logo_url", "created_at"]
        read_only_fields = fields


class CompanyRegisterSerializer(serializers.Serializer):
    # COMPANY FIELDS
    company_name = serializers.CharField(max_length=255)

    # FOUNDING ADMIN FIELDS
    full_name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def to_request(self):
        return CompanyRegistration(**self.validated_data)


class CompanyRegisteredSerializer(serializers.Serializer):
    """Registration response: the company and its admin (never the password)."""

    company = CompanySerializer()
    admin = UserSummarySerializer()


class CompanyUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    logo_url = serializers.URLField(required=False, allow_blank=True, allow_null=True)

    def to_request(self):
        data = self.validated_data
        logo_url = data.get("logo_url")
        if "logo_url" in data and logo_url is None:
            # explicit null clears the logo
            logo_url = ""
        return CompanyChanges(name=data["name"], logo_url=logo_url)


class EnrollmentStatSerializer(serializers.Serializer):
    month = serializers.CharField()
    count = serializers.IntegerField()


class DomainStatSerializer(serializers.Serializer):
    label = serializers.CharField()
    count = serializers.IntegerField()
