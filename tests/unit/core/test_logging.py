"""Unit tests for the logging module.

Covers console and JSON formatting, the standard library bridge and the
one-time sink installation.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any

import pytest

from courier.core.config import LogConfig, Settings
from courier.core.logging import (
    MAX_FIELD_VALUE_LENGTH,
    InterceptHandler,
    _json_sink,
    _LoggingState,
    _state,
    format_console_with_context,
    serialize_for_json,
    setup_logging,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def make_record(
    message: str = "Request handled",
    extra: dict[str, Any] | None = None,
    exception: Any = None,  # noqa: ANN401
) -> dict[str, Any]:
    return {
        "time": datetime(2024, 5, 1, 12, 30, 0, 123456, tzinfo=UTC),
        "level": SimpleNamespace(name="INFO"),
        "message": message,
        "name": "courier.api.asgi",
        "function": "__call__",
        "line": 42,
        "extra": extra or {},
        "exception": exception,
    }


@pytest.fixture
def unconfigured(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pretend logging has not been configured yet."""
    monkeypatch.setattr(_state, "configured", False)


@pytest.mark.unit
class TestConsoleFormat:
    """Test the console formatter."""

    def test_logging_state_initialization(self) -> None:
        """A fresh state is not configured."""
        assert _LoggingState().configured is False

    def test_basic_line(self) -> None:
        """Records render time, level, location and message."""
        line = format_console_with_context(make_record())

        assert line.startswith("<green>2024-05-01 12:30:00.123</green>")
        assert "<level>INFO    </level>" in line
        assert "<cyan>courier.api.asgi:__call__:42</cyan>" in line
        assert line.endswith("Request handled\n")

    def test_priority_fields_first(self) -> None:
        """Request fields come first, in a fixed order."""
        line = format_console_with_context(
            make_record(
                extra={
                    "user": "ada",
                    "status_code": 200,
                    "method": "GET",
                    "duration_ms": 12.5,
                }
            )
        )

        assert line.index("GET") < line.index("200") < line.index("12.5ms")
        assert line.index("12.5ms") < line.index("user=ada")

    def test_sensitive_and_long_values(self) -> None:
        """Sensitive extras are redacted and long values truncated."""
        line = format_console_with_context(
            make_record(extra={"api_key": "abc", "body": "x" * 200})
        )

        assert "api_key=[REDACTED]" in line
        assert f"body={'x' * (MAX_FIELD_VALUE_LENGTH - 3)}..." in line
        assert "abc" not in line

    def test_braces_escaped(self) -> None:
        """Braces in messages and values cannot break Loguru formatting."""
        line = format_console_with_context(
            make_record(message="got {x}", extra={"path": "/a/{id}"})
        )

        assert "got {{x}}" in line
        assert "/a/{{id}}" in line

    def test_private_and_none_extras_skipped(self) -> None:
        """Underscore-prefixed and None extras are not rendered."""
        line = format_console_with_context(
            make_record(extra={"_internal": 1, "route": None, "other": None})
        )

        assert "_internal" not in line
        assert "other" not in line
        assert "route" not in line

    def test_exception_placeholder(self) -> None:
        """Records with an exception get the traceback placeholder."""
        line = format_console_with_context(make_record(exception=object()))

        assert line.endswith("\n{exception}\n")


@pytest.mark.unit
class TestJsonFormat:
    """Test the JSON serializer."""

    def test_basic_entry(self) -> None:
        """Entries carry the standard fields and public extras."""
        line = serialize_for_json(
            make_record(extra={"method": "POST", "_hidden": True, "when": datetime(2024, 1, 1)})
        )

        assert line.endswith("\n")
        entry = json.loads(line)
        assert entry["level"] == "INFO"
        assert entry["message"] == "Request handled"
        assert entry["logger"] == "courier.api.asgi"
        assert entry["line"] == 42
        assert entry["method"] == "POST"
        assert entry["when"] == "2024-01-01 00:00:00"
        assert "_hidden" not in entry

    def test_exception_summary(self) -> None:
        """Exceptions are summarized by type and value."""
        exception = SimpleNamespace(type=ValueError, value=ValueError("bad"))

        entry = json.loads(serialize_for_json(make_record(exception=exception)))

        assert entry["exception"] == {"type": "ValueError", "value": "bad"}

    def test_json_sink_writes_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        """The JSON sink writes one line per message."""
        _json_sink(SimpleNamespace(record=make_record()))

        entry = json.loads(capsys.readouterr().out)
        assert entry["message"] == "Request handled"


@pytest.mark.unit
class TestInterceptHandler:
    """Test the standard library bridge."""

    def test_forwards_records(self, log_records: list[dict[str, Any]]) -> None:
        """Standard library records arrive in Loguru with their level."""
        record = logging.LogRecord(
            "starlette", logging.WARNING, __file__, 1, "hello %s", ("world",), None
        )

        InterceptHandler().emit(record)

        assert log_records[-1]["message"] == "hello world"
        assert log_records[-1]["level"].name == "WARNING"

    def test_custom_level_number(self, log_records: list[dict[str, Any]]) -> None:
        """Unknown level names fall back to the numeric level."""
        record = logging.LogRecord("lib", 25, __file__, 1, "custom", (), None)
        record.levelname = "NOTICE"

        InterceptHandler().emit(record)

        assert log_records[-1]["message"] == "custom"
        assert log_records[-1]["level"].no == 25


@pytest.mark.unit
@pytest.mark.usefixtures("unconfigured")
class TestSetupLogging:
    """Test sink installation."""

    def test_console_sink(self, mocker: MockerFixture) -> None:
        """The console formatter installs a colorized stdout sink."""
        mock_logger = mocker.patch("courier.core.logging.logger")
        mock_basic_config = mocker.patch("courier.core.logging.logging.basicConfig")

        setup_logging(Settings(log_config=LogConfig(log_formatter_type="console")))

        mock_logger.remove.assert_called_once_with()
        kwargs = mock_logger.add.call_args.kwargs
        assert kwargs["format"] is format_console_with_context
        assert kwargs["colorize"] is True
        assert kwargs["level"] == "INFO"
        mock_basic_config.assert_called_once()
        assert _state.configured is True

    def test_json_sink(self, mocker: MockerFixture) -> None:
        """The JSON formatter installs the structured sink."""
        mock_logger = mocker.patch("courier.core.logging.logger")
        mocker.patch("courier.core.logging.logging.basicConfig")

        setup_logging(
            Settings(log_config=LogConfig(log_formatter_type="json", log_level="DEBUG"))
        )

        args = mock_logger.add.call_args
        assert args.args[0] is _json_sink
        assert args.kwargs["level"] == "DEBUG"
        assert args.kwargs["diagnose"] is False

    def test_runs_once(self, mocker: MockerFixture) -> None:
        """Subsequent calls do nothing."""
        mock_logger = mocker.patch("courier.core.logging.logger")
        mocker.patch("courier.core.logging.logging.basicConfig")
        settings = Settings()

        setup_logging(settings)
        setup_logging(settings)

        assert mock_logger.add.call_count == 1
