"""
Gateway Errors
==============

Exception types raised by the routes and services, and the FastAPI handlers
that render them. Every failure leaves the gateway as {"error": "<message>"};
upstream detail is logged here or at the raise site and never sent to the
browser.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error. Please try again later."
INVALID_BODY_MESSAGE = "Invalid request body."


class GatewayError(Exception):
    """Base error carrying the client-facing message and HTTP status."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidRequestError(GatewayError):
    """Client input rejected before any upstream call."""

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class UpstreamError(GatewayError):
    """An upstream call failed or answered with something unusable."""

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ConfigurationError(GatewayError):
    """A required upstream credential is missing."""

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def gateway_exception_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render a GatewayError as its status code and message."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render body parsing failures as 400 instead of FastAPI's default 422.

    The frontend only ever expects {"error": ...}, so pydantic's error list
    is logged at debug level and dropped.
    """
    logger.debug(
        "Rejected request body",
        extra={"path": request.url.path, "errors": exc.errors()},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": INVALID_BODY_MESSAGE},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled errors.

    Logs the error with traceback and returns a generic message.
    Never exposes internal error details to clients.
    """
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )
