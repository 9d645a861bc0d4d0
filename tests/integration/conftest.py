"""Shared fixtures for integration tests.

Integration tests drive ``CourierApp`` through httpx's ASGI transport, so a
request travels the same way it does behind a real ASGI server.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from httpx import ASGITransport, AsyncClient
from loguru import logger

from courier.api.asgi import CourierApp
from courier.core.config import Settings, get_settings
from courier.core.logging import _state
from tests.fixtures.builders import SettingsClientFactoryType
from tests.fixtures.routing import FakeRouter


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Clear the settings cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None]:
    """Let every app configure logging afresh and drop its handlers afterwards."""
    _state.configured = False
    yield
    _state.configured = False
    logger.remove()


@pytest.fixture
async def client_with_settings(
    router: FakeRouter,
) -> AsyncGenerator[SettingsClientFactoryType]:
    """Factory creating clients for an app serving ``router`` with given settings.

    Usage:
        async def test_something(client_with_settings, settings):
            client = await client_with_settings(settings)
    """
    clients: list[AsyncClient] = []

    async def _create_client(settings: Settings) -> AsyncClient:
        transport = ASGITransport(app=CourierApp(router, settings))
        client = AsyncClient(transport=transport, base_url="http://test")
        clients.append(client)
        return client

    yield _create_client

    for client in clients:
        await client.aclose()


@pytest.fixture
async def client(
    client_with_settings: SettingsClientFactoryType, settings: Settings
) -> AsyncClient:
    """Client for an app using the development test settings."""
    return await client_with_settings(settings)
