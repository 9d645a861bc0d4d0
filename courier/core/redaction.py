"""Sensitive data redaction for request logging and error reports.

Request parameters, server params and error context routinely carry
credentials (login forms, ``Authorization`` headers, API tokens). Anything
that leaves the process through the logger passes through this module first.

Key features:
- **Pattern matching**: Regex-based detection of sensitive field names
- **Configurable fields**: Additional sensitive fields via ``LogConfig``
- **Deep redaction**: Recursive handling of nested buckets and lists
- **Headers and cookies**: Credential headers and all cookie values

Only logged or serialized copies are redacted; request data itself is never
modified.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache
from re import Pattern
from typing import Any, Final

from courier.core.config import get_settings
from courier.core.constants import REDACTED

SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "x-api-key",
        "x-auth-token",
        "x-csrf-token",
        "set-cookie",
        "proxy-authorization",
    }
)

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|auth|"
    r"credential|private[_-]?key|session|cvv|card[_-]?number)",
    re.IGNORECASE,
)

MAX_DEPTH: Final[int] = 10


@lru_cache(maxsize=1)
def _get_sensitive_fields() -> list[str]:
    """Get the configured sensitive fields from settings."""
    return get_settings().log_config.sensitive_fields


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check.

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True

    field_lower = field_name.lower()
    return any(field.lower() in field_lower for field in _get_sensitive_fields())


def redact_value(value: Any, field_name: str = "", depth: int = 0) -> Any:
    """Redact a value if its field name marks it as sensitive.

    Nested mappings and lists are walked up to ``MAX_DEPTH`` levels.
    """
    if depth > MAX_DEPTH:
        return REDACTED

    if field_name and is_sensitive_field(field_name):
        return REDACTED

    if isinstance(value, Mapping):
        return {k: redact_value(v, str(k), depth + 1) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [redact_value(item, "", depth + 1) for item in value]

    return value


def redact_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Redact a parameter bucket for logging."""
    return {key: redact_value(value, key) for key, value in params.items()}


def redact_headers(headers: Mapping[str, list[str]]) -> dict[str, list[str]]:
    """Redact every value of credential-carrying headers."""
    return {
        name: [REDACTED] * len(values)
        if name.lower() in SENSITIVE_HEADERS or is_sensitive_field(name)
        else list(values)
        for name, values in headers.items()
    }


def redact_cookies(cookies: Mapping[str, str]) -> dict[str, str]:
    """Keep cookie names and redact every cookie value."""
    return dict.fromkeys(cookies, REDACTED)


def redact_error_context(
    error: BaseException, context: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Build redacted error context for logging.

    Args:
        error: The exception to describe.
        context: Additional context to include (will be redacted).

    Returns:
        dict[str, Any]: Context safe to pass to the logger.
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if context:
        error_context.update(redact_params(context))

    error_attrs = {
        k: v
        for k, v in getattr(error, "__dict__", {}).items()
        if not k.startswith("_") and k not in {"stack_trace", "cause"}
    }
    if error_attrs:
        error_context["error_attributes"] = redact_params(error_attrs)

    return error_context
