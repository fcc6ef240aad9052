"""
Domain errors raised by services.

Every error carries a message key into the locale catalogs plus the
parameters needed to render it, so the API layer can answer in the
caller's language. They subclass ValueError: callers that already
catch ValueError keep working.

Usage:
    from apps.core.errors import NotFoundError

    raise NotFoundError("bookings.notFound")
"""
import logging
from typing import Optional

from django.db import DatabaseError, IntegrityError

from .i18n import translate

logger = logging.getLogger(__name__)


class ServiceError(ValueError):
    status_code = 400
    code = "bad_request"

    def __init__(self, message_key: str, **params):
        # translate() takes the locale as its second argument
        if "locale" in params:
            raise TypeError(f"{message_key}: 'locale' is reserved, rename the message parameter")
        self.message_key = message_key
        self.params = params
        super().__init__(translate(message_key, "en", **params))

    def localized(self, locale: Optional[str]) -> str:
        return translate(self.message_key, locale, **self.params)


class ValidationFailed(ServiceError):
    code = "validation_error"


class AuthenticationError(ServiceError):
    status_code = 401
    code = "unauthorized"


class PermissionDeniedError(ServiceError):
    status_code = 403
    code = "forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    code = "not_found"


class ConflictError(ServiceError):
    status_code = 409
    code = "conflict"


# Postgres SQLSTATE codes with a friendlier message than the raw driver error
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"
PG_NOT_NULL_VIOLATION = "23502"
PG_INSUFFICIENT_PRIVILEGE = "42501"

_PG_CODE_MESSAGES = {
    PG_UNIQUE_VIOLATION: ("errors.duplicate", 409),
    PG_FOREIGN_KEY_VIOLATION: ("errors.invalidReference", 400),
    PG_NOT_NULL_VIOLATION: ("errors.missingField", 400),
    PG_INSUFFICIENT_PRIVILEGE: ("errors.permissionDenied", 403),
}


def _pgcode(exc: Exception) -> Optional[str]:
    cause = exc.__cause__ or exc
    return getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)


def translate_database_error(exc: DatabaseError) -> ServiceError:
    """
    Map a database exception onto a ServiceError.

    Postgres errors are matched by SQLSTATE. SQLite only reports text, so
    integrity errors there are matched on the message.
    """
    code = _pgcode(exc)
    if code in _PG_CODE_MESSAGES:
        key, status = _PG_CODE_MESSAGES[code]
    elif isinstance(exc, IntegrityError) and "UNIQUE" in str(exc).upper():
        key, status = _PG_CODE_MESSAGES[PG_UNIQUE_VIOLATION]
    else:
        logger.error(f"Unmapped database error ({code}): {exc}")
        key, status = "errors.database", 500

    error_class = {
        403: PermissionDeniedError,
        409: ConflictError,
    }.get(status, ServiceError)
    error = error_class(key)
    if status == 500:
        error.status_code = 500
        error.code = "database_error"
    return error
