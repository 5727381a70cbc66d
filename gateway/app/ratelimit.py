"""
Rate Limiting
=============

Per-IP fixed-window limits built on slowapi (a Starlette wrapper around the
`limits` library).

Tiers:
    - general: GENERAL_RATE_LIMIT, one counter per client IP shared by every
      route. Applied by SlowAPIMiddleware to routes registered on the app
      itself, and by `limit_general` / `limit_expensive` on router routes,
      which the middleware cannot resolve.
    - ask: ASK_RATE_LIMIT, counted on /api/ask on top of the general tier.

Wire into app (done in main.create_app):
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

The limiter and its tier strings are built from get_settings() once, at
import time; later dependency overrides or environment changes do not
reach them.

Counters live in process memory by default and reset on restart.
"""

import logging
from typing import Callable

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import get_settings

logger = logging.getLogger(__name__)

GENERAL_LIMIT_MESSAGE = "Too many requests, please try again later."
ASK_LIMIT_MESSAGE = "Too many questions asked. Please wait a few minutes before asking more."

# Scope name slowapi gives application-wide limits; reusing it makes the
# decorated routes share the middleware's general counter.
GENERAL_SCOPE = "global"


def get_client_ip(request: Request) -> str:
    """
    Resolve the client address used as the rate limit key.

    Behind TRUST_PROXY_HOPS reverse proxies the address is taken from
    X-Forwarded-For, counting that many hops back from the socket peer.
    Without the header (or with TRUST_PROXY_HOPS=0) the socket peer is used.
    """
    peer = get_remote_address(request)
    hops = get_settings().TRUST_PROXY_HOPS
    forwarded_for = request.headers.get("x-forwarded-for")

    if not hops or not forwarded_for:
        return peer

    chain = [addr.strip() for addr in forwarded_for.split(",") if addr.strip()]
    chain.append(peer)

    # chain[-1] is the socket peer; each trusted hop moves one step left
    index = max(len(chain) - 1 - hops, 0)
    return chain[index]


_settings = get_settings()

limiter = Limiter(
    key_func=get_client_ip,
    application_limits=[_settings.GENERAL_RATE_LIMIT],
    storage_uri=_settings.RATE_LIMIT_STORAGE_URI,
    enabled=_settings.RATE_LIMIT_ENABLED,
)


def limit_general(func: Callable) -> Callable:
    """
    Decorate a router route with the general tier.

    The route must accept a `request: Request` argument. The limit is
    attached under the shared scope so it draws from the same counter as
    the application limit.
    """
    general = limiter.shared_limit(
        _settings.GENERAL_RATE_LIMIT,
        scope=GENERAL_SCOPE,
        error_message=GENERAL_LIMIT_MESSAGE,
    )
    return general(func)


def limit_expensive(func: Callable) -> Callable:
    """Decorate an expensive route with the ask tier and the general tier."""
    expensive = limiter.limit(
        _settings.ASK_RATE_LIMIT,
        error_message=ASK_LIMIT_MESSAGE,
    )
    return expensive(limit_general(func))


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Render a tripped limit as 429 with the tier's fixed message.

    Must stay synchronous: SlowAPIMiddleware calls the registered handler
    without awaiting it.
    """
    message = exc.detail if exc.limit.error_message else GENERAL_LIMIT_MESSAGE

    logger.warning(
        "Rate limit exceeded",
        extra={
            "path": request.url.path,
            "client_ip": get_client_ip(request),
            "limit": str(exc.limit.limit),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": message},
    )
