"""Error response schemas for consistent API error payloads.

This module defines the Pydantic models every API error is rendered with,
so clients receive the same structure regardless of what went wrong.

Key models:
- **ErrorType**: Closed set of error categories, each with a fixed HTTP status
- **ExceptionSummary**: Debug description of the exception behind an error
- **ErrorResponse**: The error payload itself

Serialized payloads only contain optional fields that are set and non-empty::

    {"type": "validation_error", "title": "Invalid user", "values": {...}}
"""

from __future__ import annotations

import traceback
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)

from courier.core.exceptions import CourierError
from courier.http.response import Response


def omit_empty(data: dict[str, Any], keep: frozenset[str]) -> dict[str, Any]:
    """Drop None and empty values, except for the keys in ``keep``."""
    return {
        key: value
        for key, value in data.items()
        if key in keep or value not in (None, "", {}, [])
    }


class ErrorType(Enum):
    """Error categories exposed to API clients."""

    VALIDATION = "validation_error"
    DATABASE = "database_error"
    INTERNAL = "internal_error"
    NOT_FOUND = "resource_not_found_error"
    ACCESS = "resource_access_error"

    @property
    def http_code(self) -> int:
        """HTTP status code errors of this type are returned with."""
        return _HTTP_CODES[self]


_HTTP_CODES: dict[ErrorType, int] = {
    ErrorType.VALIDATION: 400,
    ErrorType.DATABASE: 500,
    ErrorType.INTERNAL: 500,
    ErrorType.NOT_FOUND: 404,
    ErrorType.ACCESS: 403,
}


class ExceptionSummary(BaseModel):
    """Description of the exception that caused an error."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(
        ...,
        description="Exception message",
        examples=["Some exception description"],
    )

    code: str | int = Field(
        default=0,
        description="Error code of the exception",
        examples=["ROUTE_NOT_FOUND", 123],
    )

    trace: list[str] = Field(
        default_factory=list,
        description="Stack frames leading to the exception",
        examples=[["File 'app.py', line 1, in handle"]],
    )

    sql: str | None = Field(
        default=None,
        description="Failed query, for exceptions raised by a database backend",
    )

    @model_serializer(mode="wrap")
    def serialize_without_empty(
        self, handler: SerializerFunctionWrapHandler
    ) -> dict[str, Any]:
        return omit_empty(handler(self), frozenset({"message", "code", "trace"}))

    @classmethod
    def from_exception(cls, exc: BaseException) -> ExceptionSummary:
        """Summarize ``exc``, including its stack trace."""
        if isinstance(exc, CourierError):
            return cls(
                message=exc.message,
                code=exc.error_code,
                trace=[frame.rstrip() for frame in exc.stack_trace],
            )
        sql = getattr(exc, "sql", None)
        code = getattr(exc, "code", 0)
        return cls(
            message=str(exc),
            code=code if isinstance(code, (str, int)) else 0,
            trace=[frame.rstrip() for frame in traceback.format_tb(exc.__traceback__)],
            sql=sql if isinstance(sql, str) else None,
        )


class ErrorResponse(BaseModel):
    """Error payload returned by the API.

    The ``type`` determines the HTTP status of the response.
    """

    model_config = ConfigDict(frozen=True)

    type: ErrorType = Field(
        default=ErrorType.INTERNAL,
        description="Error category",
        examples=["validation_error"],
    )

    title: str = Field(
        ...,
        description="Short human-readable summary",
        examples=["Error title"],
    )

    detail: str | None = Field(
        default=None,
        description="Longer description of the error",
        examples=["Error description"],
    )

    values: dict[str, Any] | None = Field(
        default=None,
        description="Additional context, such as per-field validation messages",
        examples=[{"key1": "value1", "key2": "value2"}],
    )

    exception: ExceptionSummary | None = Field(
        default=None,
        description="Exception details (only populated outside production)",
    )

    @model_serializer(mode="wrap")
    def serialize_without_empty(
        self, handler: SerializerFunctionWrapHandler
    ) -> dict[str, Any]:
        return omit_empty(handler(self), frozenset({"type", "title"}))

    @classmethod
    def from_exception(
        cls,
        title: str,
        exc: BaseException,
        type: ErrorType = ErrorType.INTERNAL,  # noqa: A002 - mirrors the payload field
        detail: str | None = None,
        values: dict[str, Any] | None = None,
    ) -> ErrorResponse:
        """Build an error payload carrying a summary of ``exc``."""
        return cls(
            title=title,
            type=type,
            detail=detail,
            values=values,
            exception=ExceptionSummary.from_exception(exc),
        )

    @property
    def status_code(self) -> int:
        return self.type.http_code

    def to_response(self) -> Response:
        """Render as a JSON response with the status of the error type."""
        return Response().with_status(self.status_code).with_json_body(self)
