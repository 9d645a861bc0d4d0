"""Shared fixtures for unit tests."""

import os
from collections.abc import Generator

import pytest

from courier.core.config import get_settings
from courier.core.redaction import _get_sensitive_fields


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear the LRU caches before and after each test to ensure isolation.

    This fixture is autouse to ensure all tests start with fresh settings
    and don't interfere with each other.
    """
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[pytest.MonkeyPatch]:
    """Backup and restore environment variables to prevent test interference.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    original_env = os.environ.copy()

    # Clear app-specific env vars; cloud variables are set explicitly by tests
    env_prefixes = [
        "APP_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "ROUTING_CONFIG__",
        "K_SERVICE",
        "AWS_EXECUTION_ENV",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)
