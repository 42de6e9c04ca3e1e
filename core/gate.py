"""
Business rule gate.

Checks that run after the authorization engine has allowed an operation
but before anything is persisted, because they need related records.
Each check raises the matching ServiceError or returns quietly.
"""
import string
from contextlib import contextmanager

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError, RestrictedError
from django.utils import formats, timezone
from django.utils.crypto import get_random_string

from accounts.models import Role
from core.exceptions import (
    AlreadyEvaluated,
    Conflict,
    NotFound,
    NotYourIntern,
    TooEarly,
    ValidationFailed,
)


MIN_PASSWORD_LENGTH = 12
GENERATED_PASSWORD_LENGTH = 14
PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"


def generate_password(length=GENERATED_PASSWORD_LENGTH):
    """Random initial password for users created by an Admin."""
    if length < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Generated passwords must be at least {MIN_PASSWORD_LENGTH} characters.")
    return get_random_string(length, PASSWORD_ALPHABET)


def _in_company_with_role(user, company_id, role):
    return user is not None and user.company_id == company_id and user.role == role


# ---------------------------
# Assignments
# ---------------------------

def check_task_assignee(actor, intern):
    if not _in_company_with_role(intern, actor.company_id, Role.INTERN):
        raise ValidationFailed("intern_id must refer to an intern in your company.", field="intern_id")
    return intern


def check_supervisor_assignment(company_id, supervisor):
    if not _in_company_with_role(supervisor, company_id, Role.SUPERVISOR):
        raise ValidationFailed("supervisor_id must refer to a supervisor in your company.", field="supervisor_id")
    return supervisor


# ---------------------------
# Evaluations
# ---------------------------

def format_end_date(value):
    return formats.date_format(timezone.localtime(value), "N j, Y")


def check_evaluation_submission(actor, intern, already_evaluated, now=None):
    """
    Order matters for error reporting:
    existence -> ownership -> end date present -> end date elapsed -> uniqueness.

    ``already_evaluated`` is a callable so the uniqueness lookup only runs
    once every other check has passed.
    """
    if not _in_company_with_role(intern, actor.company_id, Role.INTERN):
        raise NotFound("Intern not found.")

    if intern.supervisor_id != actor.id:
        raise NotYourIntern()

    if intern.end_date is None:
        raise TooEarly(
            f"Cannot evaluate {intern.full_name} yet: no internship end date has been set."
        )

    now = now or timezone.now()
    if not intern.end_date < now:
        raise TooEarly(
            f"Cannot evaluate {intern.full_name} before their internship ends on "
            f"{format_end_date(intern.end_date)}."
        )

    if already_evaluated():
        raise AlreadyEvaluated()

    return intern


# ---------------------------
# Deletion
# ---------------------------

@contextmanager
def dependents_guard(message):
    """
    Surface the store refusing a delete (protected foreign keys) as Conflict.
    """
    try:
        with transaction.atomic():
            yield
    except (ProtectedError, RestrictedError, IntegrityError) as exc:
        raise Conflict(message) from exc
