"""Structured exception hierarchy for consistent error handling.

This module defines the exception system for Courier, providing a rich error
model that supports debugging, monitoring, and client communication.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for monitoring and alerting
- **CourierError**: Base exception with rich context and fingerprinting
- **Specialized exceptions**: Routing, body decoding, validation, readiness
  and serialization failures

None of these errors is retried or swallowed inside the library; they are
raised to the immediate caller and converted to API payloads at the boundary
(see ``courier.api.error_handler``).
"""

from __future__ import annotations

import hashlib
import traceback
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from courier.core.types import PathSegments


class ErrorCode(Enum):
    """Standardized error codes for Courier.

    These error codes provide consistent identification of error types
    across the library, enabling proper error handling and monitoring.
    """

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""

    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    """No route matches the request method and path."""

    MALFORMED_BODY = "MALFORMED_BODY"
    """The request body declared as JSON could not be decoded."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Mapped request data violates declared constraints."""

    NOT_READY = "NOT_READY"
    """A component was used before its collaborators were bound."""

    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
    """A response body could not be encoded."""

    MISSING_COMMAND = "MISSING_COMMAND"
    """A CLI request was started without a command path."""


class Severity(Enum):
    """Severity levels for errors.

    These severity levels help categorize the impact and urgency of errors,
    enabling appropriate handling, monitoring, and alerting strategies.
    """

    LOW = "LOW"
    """Expected errors caused by client input."""

    MEDIUM = "MEDIUM"
    """Errors that may affect some features but not critical ops."""

    HIGH = "HIGH"
    """Errors impacting response generation or data integrity."""

    CRITICAL = "CRITICAL"
    """Programming or wiring errors requiring immediate attention."""


class CourierError(Exception):
    """Base exception class for all Courier exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        # Capture stack trace at creation time
        self.stack_trace = traceback.format_stack()[:-1]

        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for error grouping.

        Creates a hash based on the error type and the location where it was
        raised, allowing similar errors to be grouped together.

        Returns:
            str: A hash string for error grouping
        """
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "courier" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether this error occurs during normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """Whether this error should trigger alerts (HIGH or CRITICAL)."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class RouteNotFound(CourierError):
    """Raised when no route matches the request method and path.

    Args:
        method: The request method as received
        path: The resolved path segments
        suggestion: Closest known route, when one could be computed
    """

    def __init__(
        self,
        method: str,
        path: PathSegments,
        suggestion: str | None = None,
    ) -> None:
        self.method = method
        self.path = tuple(path)
        self.suggestion = suggestion
        context: dict[str, Any] = {"method": method, "path": "/".join(self.path)}
        if suggestion:
            context["suggestion"] = suggestion
        super().__init__(
            ErrorCode.ROUTE_NOT_FOUND,
            f'Route "{method} {"/".join(self.path)}" was not found',
            Severity.LOW,
            context,
        )


class MalformedBody(CourierError):
    """Raised when a body declared as JSON cannot be decoded into an object."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(ErrorCode.MALFORMED_BODY, message, Severity.LOW, None, cause)


class NotReady(CourierError):
    """Raised when a component is used before its collaborators are bound.

    This is a programming error and is never recoverable at runtime.
    """

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.NOT_READY, message, Severity.CRITICAL)


class SerializationError(CourierError):
    """Raised when a response body cannot be encoded."""

    def __init__(
        self, message: str, fmt: str, cause: Exception | None = None
    ) -> None:
        super().__init__(
            ErrorCode.SERIALIZATION_ERROR,
            message,
            Severity.HIGH,
            {"format": fmt},
            cause,
        )


class MissingCommandPath(CourierError):
    """Raised when a CLI request is created without a command path."""

    def __init__(self) -> None:
        super().__init__(
            ErrorCode.MISSING_COMMAND,
            "Missing the required path argument (1)",
            Severity.LOW,
        )


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single violated constraint on a mapped field."""

    field: str
    message: str
    kind: str = "value_error"

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "kind": self.kind}


class ValidationFailure(CourierError):
    """Raised when mapped request data violates its declared constraints.

    Args:
        message: Summary of the failure
        errors: Field-level violations, in the order they were detected
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        errors: Sequence[FieldError] = (),
        cause: Exception | None = None,
    ) -> None:
        self.errors = list(errors)
        super().__init__(
            ErrorCode.VALIDATION_ERROR,
            message,
            Severity.LOW,
            {"fields": [error.field for error in self.errors]} if self.errors else None,
            cause,
        )

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationFailure:
        """Build a failure describing one invalid field."""
        return cls(message, [FieldError(field, message)])

    def field_messages(self) -> dict[str, list[str]]:
        """Group the violation messages by field name."""
        grouped: dict[str, list[str]] = {}
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped


class ValidationMultiFailure(ValidationFailure):
    """Raised when more than one validation failed.

    Constraint violations on different fields and a failing model check each
    count as one failure. The underlying failures stay distinct and can be
    enumerated; their messages are never merged into one string.

    Args:
        failures: The individual failures, in the order they were detected
        message: Summary of the failure; defaults to the failure count
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        failures: Sequence[ValidationFailure],
        message: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.failures = list(failures)
        super().__init__(
            message or f"{len(self.failures)} validations failed",
            [error for failure in self.failures for error in failure.errors],
            cause,
        )

    def __iter__(self) -> Iterator[ValidationFailure]:
        return iter(self.failures)

    def __len__(self) -> int:
        return len(self.failures)
