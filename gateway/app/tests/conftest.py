"""
Shared fixtures for gateway tests.

Upstream HTTP is replaced by an AsyncMock client installed on the app
state; settings are overridden through FastAPI dependency overrides; rate
limit counters are cleared around every test.
"""

from typing import Any
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from fastapi.testclient import TestClient

from gateway.app.config import Settings, get_settings
from gateway.app.main import create_app
from gateway.app.ratelimit import limiter


def make_response(payload: Any, status_code: int = 200) -> Mock:
    """Build a stand-in for httpx.Response returning `payload` from .json()."""
    response = Mock(spec=httpx.Response)
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def upstream_response():
    """Factory for mocked upstream responses"""
    return make_response


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Clear in-memory rate limit counters before and after each test."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def mock_settings():
    """Settings with every upstream key present"""
    return Settings(
        VENICE_API_KEY="test-venice-key",
        COINGECKO_API_KEY="test-coingecko-key",
        TWELVEDATA_API_KEY="test-twelvedata-key",
        FCSAPI_API_KEY="test-fcsapi-key",
    )


@pytest.fixture
def mock_http_client():
    """Create mock upstream HTTP client"""
    client = AsyncMock()
    return client


@pytest.fixture
def app(mock_settings, mock_http_client):
    """Create test FastAPI application"""
    app = create_app()

    app.dependency_overrides[get_settings] = lambda: mock_settings

    mock_app_state = Mock()
    mock_app_state.http_client = mock_http_client
    app.state.app_state = mock_app_state

    return app


@pytest.fixture
def client(app):
    """Create test client"""
    return TestClient(app)
