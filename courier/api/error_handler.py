"""Conversion of exceptions into API error payloads.

``error_response_for`` is the single place where exceptions raised while
handling a request become ``ErrorResponse`` payloads. It logs every error
with redacted context and hides internal details in production.

Mapping:

- ``ValidationFailure``/``ValidationMultiFailure``: validation (400), with
  per-field messages in ``values``
- ``MalformedBody``, ``MissingCommandPath``: validation (400)
- ``RouteNotFound``: resource not found (404)
- every other error: internal (500)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger

from courier.api.constants import (
    INTERNAL_ERROR_TITLE,
    MALFORMED_BODY_TITLE,
    PRODUCTION_ERROR_TITLE,
    VALIDATION_ERROR_TITLE,
)
from courier.api.schemas.errors import ErrorResponse, ErrorType, ExceptionSummary
from courier.core.config import Settings, get_settings
from courier.core.exceptions import (
    CourierError,
    MalformedBody,
    MissingCommandPath,
    RouteNotFound,
    ValidationFailure,
    ValidationMultiFailure,
)
from courier.core.redaction import redact_error_context


def error_type_for(exc: BaseException) -> ErrorType:
    """Error category an exception is reported under."""
    if isinstance(exc, (ValidationFailure, MalformedBody, MissingCommandPath)):
        return ErrorType.VALIDATION
    if isinstance(exc, RouteNotFound):
        return ErrorType.NOT_FOUND
    return ErrorType.INTERNAL


def _validation_values(exc: ValidationFailure) -> dict[str, Any]:
    values: dict[str, Any] = {"fields": exc.field_messages()}
    if isinstance(exc, ValidationMultiFailure):
        values["failures"] = [
            {"message": failure.message, "fields": failure.field_messages()}
            for failure in exc
        ]
    return values


def _log_error(exc: BaseException, context: Mapping[str, Any] | None) -> None:
    error_context = redact_error_context(exc, context)
    if isinstance(exc, CourierError):
        if exc.should_alert:
            logger.error(
                "Handling {}: {}",
                type(exc).__name__,
                exc.message,
                error_code=exc.error_code,
                severity=exc.severity.value,
                fingerprint=exc.fingerprint,
                **error_context,
            )
        else:
            logger.warning(
                "Handling {}: {}",
                type(exc).__name__,
                exc.message,
                error_code=exc.error_code,
                severity=exc.severity.value,
                **error_context,
            )
        return

    logger.opt(exception=exc).error(
        "Unhandled exception: {}",
        type(exc).__name__,
        **error_context,
    )


def error_response_for(
    exc: BaseException,
    settings: Settings | None = None,
    context: Mapping[str, Any] | None = None,
) -> tuple[ErrorResponse, int]:
    """Convert an exception into an error payload and its HTTP status.

    Args:
        exc: The exception raised while handling a request.
        settings: Application settings; defaults to the cached settings.
        context: Request details (method, path, ...) added to the log entry.

    Returns:
        tuple[ErrorResponse, int]: The payload and the status to send it with.
    """
    settings = settings or get_settings()
    _log_error(exc, context)

    error_type = error_type_for(exc)
    production = settings.environment == "production"

    if isinstance(exc, ValidationFailure):
        response = ErrorResponse(
            type=error_type,
            title=VALIDATION_ERROR_TITLE,
            detail=exc.message,
            values=_validation_values(exc),
        )
    elif isinstance(exc, MalformedBody):
        response = ErrorResponse(
            type=error_type, title=MALFORMED_BODY_TITLE, detail=exc.message
        )
    elif isinstance(exc, CourierError) and exc.is_expected:
        response = ErrorResponse(type=error_type, title=exc.message, values=exc.context)
    elif production:
        response = ErrorResponse(type=error_type, title=PRODUCTION_ERROR_TITLE)
    else:
        title = exc.message if isinstance(exc, CourierError) else INTERNAL_ERROR_TITLE
        response = ErrorResponse(
            type=error_type,
            title=title,
            detail=f"{type(exc).__name__}: {exc}",
            exception=ExceptionSummary.from_exception(exc),
        )

    return response, error_type.http_code
