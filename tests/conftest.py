"""Root conftest.py for the Courier test suite.

This file contains project-wide fixtures and pytest configuration.
"""

from collections.abc import Generator, Mapping
from pathlib import Path
from typing import Any

import pytest
from loguru import logger

from courier.core.config import RoutingConfig, Settings
from courier.http.factory import RequestFactory
from courier.http.message import ServerMessage
from courier.http.request import Request
from tests.fixtures.builders import RequestBuilder
from tests.fixtures.routing import FakeRouter


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """Provide an empty document root for static files.

    Returns:
        Path: The created directory.
    """
    root = tmp_path / "public"
    root.mkdir()
    return root


@pytest.fixture
def settings(document_root: Path) -> Settings:
    """Provide settings serving static files from a temporary directory.

    Returns:
        Settings: Development settings with console logging.
    """
    return Settings(
        environment="development",
        routing_config=RoutingConfig(document_root=document_root),
    )


@pytest.fixture
def router() -> FakeRouter:
    """Provide an empty in-memory router."""
    return FakeRouter()


@pytest.fixture
def make_request(router: FakeRouter, settings: Settings) -> RequestBuilder:
    """Factory building requests the way a host does.

    Returns:
        RequestBuilder: Callable taking method, URI, headers, body and any
            ``ServerMessage.create`` keyword argument.
    """

    def _make(
        method: str = "GET",
        uri: str = "/",
        headers: Mapping[str, Any] | None = None,
        body: bytes | str = b"",
        **kwargs: Any,
    ) -> Request:
        message = ServerMessage.create(method, uri, headers, body, **kwargs)
        return RequestFactory.from_message(message, router=router, settings=settings)

    return _make


@pytest.fixture
def log_records() -> Generator[list[dict[str, Any]]]:
    """Capture Loguru records emitted during the test.

    Returns:
        list[dict[str, Any]]: Records in emission order.
    """
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
