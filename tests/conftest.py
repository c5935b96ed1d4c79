"""Global test configuration and fixtures.

Fixture Scoping Strategy:
- session: Test settings (immutable)
- function: Requests, handlers and options (fresh per test)
"""

import pytest
from starlette.requests import Request
from starlette.responses import Response

from cors_protocol.domain.options import CorsOptions
from cors_protocol.infrastructure.config import Settings
from tests.factories import (
    cors_request_factory,
    handler_factory,
    preflight_request_factory,
    request_factory,
)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings (session-scoped, settings are immutable).

    Returns:
        Settings instance configured for testing
    """
    return Settings(
        app_env="testing",
        log_level="DEBUG",
    )


@pytest.fixture
def same_origin_request() -> Request:
    """Request without an Origin header."""
    return request_factory()


@pytest.fixture
def cors_request() -> Request:
    """Cross-origin GET from http://cors.test to http://api.test/."""
    return cors_request_factory()


@pytest.fixture
def preflight_request() -> Request:
    """Preflight asking for POST with a content-type header."""
    return preflight_request_factory()


@pytest.fixture
def handler():
    """Sync handler returning an empty 200 response and recording calls."""
    return handler_factory(Response())


@pytest.fixture
def default_options() -> CorsOptions:
    """Options with every field unset."""
    return CorsOptions()
