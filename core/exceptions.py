"""
Closed failure taxonomy raised by the orchestrators.

Every failure carries a stable machine-checkable ``kind`` and a
human-readable ``message``. Mapping to HTTP happens in ``core.handlers``;
nothing in here knows about status codes.
"""
import enum
import functools
import logging

from django.db import DatabaseError


logger = logging.getLogger(__name__)


class DenyReason(str, enum.Enum):
    CROSS_COMPANY = "cross_company"
    WRONG_ROLE = "wrong_role"
    NOT_OWNER = "not_owner"
    SELF_DELETE = "self_delete"
    NO_VALID_FIELDS = "no_valid_fields"


class ServiceError(Exception):
    kind = "service_error"
    default_message = "The request could not be completed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ServiceError):
    kind = "unauthenticated"
    default_message = "Authentication failed."

    MISSING = "missing"
    INVALID = "invalid"

    def __init__(self, reason=INVALID, message=None):
        self.reason = reason
        if message is None:
            message = (
                "Authentication failed: No token provided."
                if reason == self.MISSING
                else "Authentication failed: Invalid token."
            )
        super().__init__(message)


class Forbidden(ServiceError):
    kind = "forbidden"
    default_message = "You do not have permission to perform this action."

    def __init__(self, reason, message=None):
        self.reason = reason
        super().__init__(message)


class SelfDeleteForbidden(Forbidden):
    kind = "self_delete_forbidden"
    default_message = "Admins cannot delete their own account."

    def __init__(self, message=None):
        super().__init__(DenyReason.SELF_DELETE, message)


class ValidationFailed(ServiceError):
    kind = "validation_failed"
    default_message = "The request is missing required fields or contains invalid values."

    def __init__(self, message=None, field=None):
        self.field = field
        super().__init__(message)


class NotFound(ServiceError):
    kind = "not_found"
    default_message = "Resource not found."


class DuplicateEmail(ServiceError):
    kind = "duplicate_email"
    default_message = "A user with this email already exists."


class InvalidCredentials(ServiceError):
    kind = "invalid_credentials"
    default_message = "Invalid password."


class Conflict(ServiceError):
    kind = "conflict"
    default_message = "The request conflicts with existing records."


class AlreadyEvaluated(Conflict):
    kind = "already_evaluated"
    default_message = "This intern has already been evaluated by you."


class NotYourIntern(ServiceError):
    kind = "not_your_intern"
    default_message = "You can only evaluate interns you supervise."


class TooEarly(ServiceError):
    kind = "too_early"
    default_message = "The internship has not ended yet."


class NoValidFields(ServiceError):
    kind = "no_valid_fields"
    default_message = "No valid update fields provided."


class PersistenceFailed(ServiceError):
    kind = "persistence_failed"
    default_message = "The request could not be saved. Please try again later."


def translate_storage_errors(func):
    """
    Turn storage errors that no orchestrator anticipated into PersistenceFailed.

    Domain failures pass through untouched. Specific IntegrityError handling
    (duplicate email, evaluation race, dependents on delete) happens inside
    the wrapped operation before this catches anything.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ServiceError:
            raise
        except DatabaseError as exc:
            logger.exception("Storage failure in %s", func.__qualname__)
            raise PersistenceFailed() from exc

    return wrapper
