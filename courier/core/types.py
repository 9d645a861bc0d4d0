"""Type aliases for dynamic data structures throughout the application.

This module centralizes type definitions for data that cannot be statically
typed, providing clear semantic meaning for request parameters, notices and
error context.
"""

from typing import Any

# JSON-compatible type that represents any valid JSON value
type JsonValue = (
    dict[str, "JsonValue"] | list["JsonValue"] | str | int | float | bool | None
)

# A named mapping of request parameters (query, post, put, merged, route)
type ParamBucket = dict[str, Any]

# Route path: lowercase segments, empty tuple is the root
type PathSegments = tuple[str, ...]

# Notices are plain strings or records {"content": ..., "title"?: ..., "type"?: ...}
type Notice = str | dict[str, str]

# Context dictionary for error details and debugging information
# Values must be JSON-serializable for API responses
type ErrorContext = dict[str, Any]

# Context dictionary for logging additional information
type LogContext = dict[str, Any]
