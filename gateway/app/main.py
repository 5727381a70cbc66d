"""
FastAPI Gateway Application Factory
===================================

This is the main entry point for the Satoshi Oracle gateway, which sits
between the browser frontend and the third-party APIs it must not call
directly (API keys stay on the server).

Architecture:
    Browser → Gateway (this service) → Venice AI / CoinGecko / Twelve Data / FCSAPI

Routers:
    - /api/ask          : Questions to the Satoshi Oracle (Venice AI)
    - /api/market-data  : CoinGecko bitcoin market data (passthrough)
    - /api/asset-prices : Bitcoin, gold and silver prices (normalized)
    - /api/health       : Health check endpoint

Environment Variables:
    - VENICE_API_KEY: Venice AI API key
    - COINGECKO_API_KEY: CoinGecko demo API key
    - TWELVEDATA_API_KEY: Twelve Data API key
    - FCSAPI_API_KEY: FCSAPI access key
    - ALLOWED_ORIGINS: Comma-separated CORS origins (defaults to the frontend origins)
    - GENERAL_RATE_LIMIT / ASK_RATE_LIMIT: Rate limit tiers (default "100/15 minutes" / "20/15 minutes")
    - PORT: Listen port (default: 3001)
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn gateway.app.main:app --reload --port 3001

    Production:
        uvicorn gateway.app.main:app --host 0.0.0.0 --port 3001 --proxy-headers

    Rate limit counters are per process; run a single worker or point
    RATE_LIMIT_STORAGE_URI at a shared store.
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from gateway.app.config import Settings, get_settings, validate_configuration
from gateway.app.errors import (
    GatewayError,
    gateway_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from gateway.app.markets import markets_router
from gateway.app.models import HealthResponse
from gateway.app.oracle import oracle_router
from gateway.app.ratelimit import limiter, rate_limit_exceeded_handler

SERVICE_NAME = "satoshi-oracle-gateway"
SERVICE_VERSION = "1.0.0"


# Configure structured JSON logging
def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class AppState:
    """
    Global application state container.

    Holds the shared upstream HTTP client and the loaded settings.
    """
    def __init__(self):
        self.http_client: Optional[httpx.AsyncClient] = None
        self.settings: Optional[Settings] = None


app_state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup tasks:
        - Load configuration and set up logging
        - Log missing upstream credentials
        - Create the shared httpx.AsyncClient

    Shutdown tasks:
        - Close the HTTP client
    """
    settings = get_settings()
    app_state.settings = settings

    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("gateway.main")

    status = validate_configuration(settings)
    for warning in status["warnings"]:
        logger.warning(warning)

    app_state.http_client = httpx.AsyncClient()
    logger.info("Initialized upstream HTTP client")

    logger.info(
        f"Satoshi Oracle server is running on port {settings.PORT}",
        extra={
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "rate_limits": status["rate_limits"],
        }
    )

    yield

    logger.info("Shutting down gateway service")

    await app_state.http_client.aclose()
    app_state.http_client = None

    logger.info("Gateway service shutdown complete")


def create_app() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application instance with:
        - Lifespan management
        - CORS and rate limit middleware
        - Route handlers
        - Exception handlers

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Satoshi Oracle Gateway",
        description="API gateway for the Satoshi Oracle frontend",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.state.app_state = app_state
    app.state.limiter = limiter

    # Last added runs first: CORS must sit outside the limiter
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(GatewayError, gateway_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(oracle_router, prefix="/api", tags=["Oracle"])
    app.include_router(markets_router, prefix="/api", tags=["Markets"])

    @app.get("/api/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        """Liveness probe; does not touch any upstream."""
        return HealthResponse(status="ok", timestamp=utc_timestamp())

    @app.get("/", tags=["System"])
    async def root() -> Dict[str, Any]:
        """
        Root endpoint with service information.

        Returns:
            dict: Service metadata and available endpoints
        """
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "endpoints": {
                "health": "/api/health",
                "ask": "/api/ask",
                "market_data": "/api/market-data",
                "asset_prices": "/api/asset-prices",
            }
        }

    return app


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "gateway.app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
