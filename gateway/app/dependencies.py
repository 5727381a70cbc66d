import httpx
from fastapi import Request

from .errors import GatewayError


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Dependency to get the shared upstream HTTP client from app state.

    The client is created by the lifespan handler in main.py.
    """
    app_state = getattr(request.app.state, "app_state", None)
    client = getattr(app_state, "http_client", None) if app_state else None
    if client is None:
        raise GatewayError("Upstream HTTP client not initialized", status_code=503)
    return client
