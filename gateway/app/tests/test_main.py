"""
Tests for the application factory: health check, root endpoint, CORS,
lifespan and the global error handlers.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from fastapi import status
from fastapi.testclient import TestClient

from gateway.app.main import app_state, create_app, utc_timestamp


def test_health_check(client, mock_http_client):
    response = client.get("/api/health")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "ok"
    assert data["timestamp"].endswith("Z")

    parsed = datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))
    assert abs((datetime.now(timezone.utc) - parsed).total_seconds()) < 60

    mock_http_client.get.assert_not_called()
    mock_http_client.post.assert_not_called()


def test_utc_timestamp_has_milliseconds():
    # 2024-01-01T00:00:00.000Z
    timestamp = utc_timestamp()
    assert len(timestamp) == 24
    assert timestamp[19] == "."


def test_root_lists_endpoints(client):
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    endpoints = response.json()["endpoints"]
    assert endpoints["ask"] == "/api/ask"
    assert endpoints["asset_prices"] == "/api/asset-prices"


def test_cors_allows_frontend_origin(client):
    response = client.get("/api/health", headers={"Origin": "https://satsofbitcoin.com"})

    assert response.headers["access-control-allow-origin"] == "https://satsofbitcoin.com"


def test_cors_preflight_for_ask(client):
    response = client.options(
        "/api/ask",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert "POST" in response.headers["access-control-allow-methods"]


def test_cors_rejects_unknown_origin(client):
    response = client.get("/api/health", headers={"Origin": "https://evil.example.com"})

    assert "access-control-allow-origin" not in response.headers


def test_cors_rejects_unlisted_method(client):
    response = client.options(
        "/api/ask",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "DELETE",
        },
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_missing_http_client_returns_503(app):
    app.state.app_state.http_client = None
    client = TestClient(app)

    response = client.get("/api/market-data")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert "error" in response.json()


def test_lifespan_creates_and_closes_http_client():
    app = create_app()

    with patch("gateway.app.main.httpx.AsyncClient") as client_class:
        client_class.return_value.aclose = AsyncMock()
        with TestClient(app):
            assert app_state.http_client is client_class.return_value

        client_class.return_value.aclose.assert_awaited_once()
        assert app_state.http_client is None
