import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler

from .exceptions import (
    AlreadyEvaluated,
    Conflict,
    DuplicateEmail,
    Forbidden,
    InvalidCredentials,
    NoValidFields,
    NotFound,
    NotYourIntern,
    PersistenceFailed,
    SelfDeleteForbidden,
    ServiceError,
    TooEarly,
    Unauthenticated,
    ValidationFailed,
)


logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    Unauthenticated: status.HTTP_401_UNAUTHORIZED,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    SelfDeleteForbidden: status.HTTP_403_FORBIDDEN,
    Forbidden: status.HTTP_403_FORBIDDEN,
    NotYourIntern: status.HTTP_403_FORBIDDEN,
    ValidationFailed: status.HTTP_400_BAD_REQUEST,
    TooEarly: status.HTTP_400_BAD_REQUEST,
    NoValidFields: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    DuplicateEmail: status.HTTP_409_CONFLICT,
    AlreadyEvaluated: status.HTTP_409_CONFLICT,
    Conflict: status.HTTP_409_CONFLICT,
    PersistenceFailed: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc):
    for error_class in type(exc).__mro__:
        if error_class in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_class]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def render_service_error(exc):
    body = {"error": exc.kind, "detail": exc.message}

    reason = getattr(exc, "reason", None)
    if reason is not None:
        body["reason"] = getattr(reason, "value", reason)

    field = getattr(exc, "field", None)
    if field:
        body["field"] = field

    return Response(body, status=status_for(exc))


def first_validation_error(detail, path=()):
    """(field path, message) of the first error in a DRF ``ValidationError.detail``."""
    if isinstance(detail, dict) and detail:
        key, value = next(iter(detail.items()))
        return first_validation_error(value, path + (str(key),))
    if isinstance(detail, list) and detail:
        return first_validation_error(detail[0], path)
    return path, str(detail)


def render_validation_error(exc):
    path, message = first_validation_error(exc.detail)
    field = path[0] if path and path[0] != api_settings.NON_FIELD_ERRORS_KEY else None

    response = render_service_error(ValidationFailed(message, field=field))
    if isinstance(exc.detail, dict):
        response.data["errors"] = exc.detail
    return response


def render_authentication_error(exc):
    if isinstance(exc, exceptions.NotAuthenticated):
        error = Unauthenticated(Unauthenticated.MISSING)
    else:
        code = exc.get_codes()
        reason = code if code in (Unauthenticated.MISSING, Unauthenticated.INVALID) else Unauthenticated.INVALID
        error = Unauthenticated(reason, str(exc.detail))

    response = render_service_error(error)
    auth_header = getattr(exc, "auth_header", None)
    if auth_header:
        response["WWW-Authenticate"] = auth_header
    return response


def service_exception_handler(exc, context):
    """
    DRF exception handler: domain failures become ``{"error", "detail"}``
    bodies with a mapped status. Serializer errors render as validation_failed
    with the per-field map under ``errors``; the rest goes through DRF's handler.
    Unexpected exceptions are logged and answered with a generic 500.
    """
    if isinstance(exc, ServiceError):
        return render_service_error(exc)

    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        return render_authentication_error(exc)

    if isinstance(exc, exceptions.ValidationError):
        return render_validation_error(exc)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.exception("Unhandled error in %s", type(view).__name__ if view else "request", exc_info=exc)
    return render_service_error(PersistenceFailed("Something went wrong. Please try again later."))
