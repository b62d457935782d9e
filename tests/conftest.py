"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration and shared fixtures.
Fixtures marked autouse apply to every test unless opted out.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from gemini_search.config import Credentials
from tests.helpers import TEST_API_KEY

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "gemini_search.config.load_dotenv",
            lambda *_args, **_kwargs: False,
            raising=False,
        )


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Ensure a clean GEMINI_* environment for each test.

    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith("GEMINI_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if os.getenv("ENABLE_API_TESTS"):
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(api_key=TEST_API_KEY)
