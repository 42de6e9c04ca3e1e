from django.db import transaction

from company.models import Company
from .models import User, Role


class IdentityDirectory:
    """
    Data access for users and companies.

    Orchestrators receive one of these instead of reaching for the ORM
    directly, so the storage they depend on is explicit.
    """

    # ---------------------------
    # Users
    # ---------------------------

    def get_user(self, user_id):
        return (
            User.objects.select_related("company", "supervisor")
            .filter(pk=user_id)
            .first()
        )

    def get_user_by_email(self, email):
        return User.objects.select_related("company").filter(email__iexact=email).first()

    def email_taken(self, email):
        return User.objects.filter(email__iexact=email).exists()

    def users_in_company(self, company_id):
        return User.objects.filter(company_id=company_id).order_by("id")

    def interns_in_company(self, company_id):
        return User.objects.filter(company_id=company_id, role=Role.INTERN)

    def create_user(self, company_id, password, **fields):
        user = User(company_id=company_id, **fields)
        user.password = password
        user.save()
        return user

    def update_user(self, user, changes):
        for name, value in changes.items():
            setattr(user, name, value)
        if changes:
            user.save(update_fields=list(changes))
        return user

    def set_password_digest(self, user, digest):
        user.password = digest
        user.save(update_fields=["password"])

    def delete_user(self, user):
        user.delete()

    # ---------------------------
    # Companies
    # ---------------------------

    def get_company(self, company_id):
        return Company.objects.filter(pk=company_id).first()

    def create_company_with_admin(self, company_name, full_name, email, password):
        """Company and its founding Admin are created together or not at all."""
        with transaction.atomic():
            company = Company.objects.create(name=company_name)
            admin = User(
                company=company,
                full_name=full_name,
                email=email,
                role=Role.ADMIN,
            )
            admin.password = password
            admin.save()
        return company, admin

    def update_company(self, company, changes):
        for name, value in changes.items():
            setattr(company, name, value)
        if changes:
            company.save(update_fields=list(changes))
        return company
