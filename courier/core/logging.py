"""Structured logging built on Loguru.

Courier logs through the global Loguru ``logger`` with keyword context
(``method``, ``path``, ``route``, ``status_code`` ...). ``setup_logging``
installs one sink, once per process:

- **console**: Human-readable output with the request context inline
  (development)
- **json**: One JSON document per line (production and container platforms)

Standard library logging (from Starlette, uvicorn or the host framework) is
routed into Loguru through ``InterceptHandler`` so every record shares the
same format.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Final, Protocol, cast

from loguru import logger

from courier.core.redaction import is_sensitive_field


class _LoggingState:
    """Tracks whether logging has been configured."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()


class LogConfigProtocol(Protocol):
    """Protocol for log configuration objects."""

    @property
    def log_level(self) -> str: ...

    @property
    def log_formatter_type(self) -> str | None: ...


class SettingsProtocol(Protocol):
    """Protocol for settings objects that setup_logging can accept."""

    @property
    def debug(self) -> bool: ...

    @property
    def log_config(self) -> LogConfigProtocol: ...


DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

# Request fields shown first, in this order
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "method",
    "path",
    "route",
    "status_code",
    "duration_ms",
    "client_ip",
)


def _escape(value: object) -> str:
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_field(key: str, value: object) -> str:
    """Format one context field as ``key=value`` for the console."""
    if key == "duration_ms":
        return f"{value}ms"
    if key in PRIORITY_FIELDS:
        return _escape(value)

    str_value = "[REDACTED]" if is_sensitive_field(key) else str(value)
    if len(str_value) > MAX_FIELD_VALUE_LENGTH:
        str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(str_value)}"


def format_console_with_context(record: dict[str, Any]) -> str:
    """Format a record for the console with its context fields inline.

    Args:
        record: Loguru record to format.

    Returns:
        str: Loguru format string for this record.
    """
    time_str = record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
    location = f"{record['name']}:{record['function']}:{record['line']}"
    parts = [
        f"<green>{time_str}</green>",
        f"<level>{record['level'].name: <8}</level>",
        f"<cyan>{location}</cyan>",
    ]

    extra = record.get("extra", {})
    context = [
        f"<yellow>{_format_field(field, extra[field])}</yellow>"
        for field in PRIORITY_FIELDS
        if extra.get(field) is not None
    ]
    context.extend(
        f"<dim>{_format_field(key, value)}</dim>"
        for key, value in extra.items()
        if key not in PRIORITY_FIELDS and not key.startswith("_") and value is not None
    )
    if context:
        parts.append(" ".join(f"[{part}]" for part in context))

    parts.append(_escape(record["message"]))
    line = " | ".join(parts)
    if record.get("exception"):
        line += "\n{exception}"
    return line + "\n"


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format a record as a single JSON line.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    if extra := record.get("extra", {}):
        log_entry.update({k: v for k, v in extra.items() if not k.startswith("_")})

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return json.dumps(log_entry, default=str) + "\n"


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside the logging module
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _json_sink(message: object) -> None:
    """Write structured records to stdout."""
    record = getattr(message, "record", None)
    if record is not None:
        sys.stdout.write(serialize_for_json(record))
        sys.stdout.flush()


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru with the formatter selected in settings.

    Calling it again is a no-op.

    Args:
        settings: Application settings containing log configuration.
    """
    if _state.configured:
        return

    logger.remove()

    formatter_type = settings.log_config.log_formatter_type or "console"

    if formatter_type == "json":
        logger.add(
            _json_sink,
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=settings.log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=settings.log_config.log_level,
    )
    _state.configured = True
