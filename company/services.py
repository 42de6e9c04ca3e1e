import logging
from dataclasses import dataclass
from datetime import datetime

from django.contrib.auth.hashers import make_password
from django.db import IntegrityError
from django.db.models import Count, F, Value
from django.db.models.functions import Coalesce, NullIf, TruncMonth
from django.utils import timezone

from accounts.directory import IdentityDirectory
from core.engine import Intent, Operation, Resource, authorize
from core.exceptions import NotFound, ValidationFailed, translate_storage_errors


logger = logging.getLogger(__name__)

ENROLLMENT_MONTHS = 6
UNASSIGNED_LABEL = "Unassigned"


@dataclass
class CompanyRegistration:
    company_name: str
    full_name: str
    email: str
    password: str


@dataclass
class CompanyChanges:
    name: str
    logo_url: str = None


def last_months(now, count=ENROLLMENT_MONTHS):
    """(year, month) pairs for the ``count`` months ending with ``now``'s month, oldest first."""
    year, month = now.year, now.month
    months = []
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def _required(value, field, label):
    value = (value or "").strip()
    if not value:
        raise ValidationFailed(f"{label} is required.", field=field)
    return value


class CompanyService:

    def __init__(self, directory=None):
        self.directory = directory or IdentityDirectory()

    @translate_storage_errors
    def register(self, registration):
        """
        Create a company together with its founding Admin.
        Unauthenticated: this operation does not go through the engine.
        """
        company_name = _required(registration.company_name, "company_name", "Company name")
        full_name = _required(registration.full_name, "full_name", "Full name")
        email = _required(registration.email, "email", "Email")
        if not registration.password:
            raise ValidationFailed("Password is required.", field="password")

        if self.directory.email_taken(email):
            raise ValidationFailed("This email is already registered.", field="email")

        try:
            company, admin = self.directory.create_company_with_admin(
                company_name=company_name,
                full_name=full_name,
                email=email,
                password=make_password(registration.password),
            )
        except IntegrityError:
            raise ValidationFailed("This email is already registered.", field="email")

        logger.info("Company %s registered with admin %s", company.id, admin.id)
        return company, admin

    @translate_storage_errors
    def get(self, actor):
        company = self.directory.get_company(actor.company_id)
        if company is None:
            raise NotFound("Company not found.")
        authorize(actor, Intent(Operation.READ, Resource.COMPANY, company_id=company.id))
        return company

    @translate_storage_errors
    def update(self, actor, changes):
        requested = {"name"} | ({"logo_url"} if changes.logo_url is not None else set())
        allowed = authorize(
            actor,
            Intent(Operation.UPDATE, Resource.COMPANY, company_id=actor.company_id, fields=frozenset(requested)),
            "Forbidden: Only Admins can update the company profile.",
        )

        updates = {"name": _required(changes.name, "name", "Company name")}
        if "logo_url" in allowed:
            updates["logo_url"] = changes.logo_url or None

        company = self.directory.get_company(actor.company_id)
        if company is None:
            raise NotFound("Company not found.")
        return self.directory.update_company(company, updates)

    # ---------------------------
    # Statistics (Admin dashboard)
    # ---------------------------

    def _authorize_statistics(self, actor):
        authorize(
            actor,
            Intent(Operation.READ, Resource.STATISTICS, company_id=actor.company_id),
            "Forbidden: Only Admins can view statistics.",
        )

    @translate_storage_errors
    def enrollment_statistics(self, actor, now=None):
        """Interns created per month over the last six months, zero-filled."""
        self._authorize_statistics(actor)

        now = timezone.localtime(now or timezone.now())
        months = last_months(now)
        first_year, first_month = months[0]
        start = timezone.make_aware(datetime(first_year, first_month, 1))

        rows = (
            self.directory.interns_in_company(actor.company_id)
            .filter(created_at__gte=start)
            .order_by()
            .annotate(month=TruncMonth("created_at"))
            .values("month")
            .annotate(count=Count("id"))
        )
        counts = {(row["month"].year, row["month"].month): row["count"] for row in rows}

        return [
            {"month": f"{year:04d}-{month:02d}", "count": counts.get((year, month), 0)}
            for year, month in months
        ]

    @translate_storage_errors
    def domain_statistics(self, actor):
        """Interns grouped by domain, falling back to their supervisor's name."""
        self._authorize_statistics(actor)

        rows = (
            self.directory.interns_in_company(actor.company_id)
            .order_by()
            .annotate(
                label=Coalesce(
                    NullIf(F("domain"), Value("")),
                    F("supervisor__full_name"),
                    Value(UNASSIGNED_LABEL),
                )
            )
            .values("label")
            .annotate(count=Count("id"))
            .order_by("-count", "label")
        )
        return [{"label": row["label"], "count": row["count"]} for row in rows]
