"""
Oracle Routes - Venice AI Forwarding
====================================

Endpoints:
----------
- POST /ask: Validate a question and forward it to the chat-completion API

Flow:
-----
1. Rate limit check (ask tier + general tier)
2. Validate prompt and mode (400 before any upstream call)
3. Select persona (system prompt + model) from mode
4. Single upstream call, no retry
5. Return {"answer": ...} or {"error": ...}
"""

from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Body, Depends, Request

from ..config import Settings, get_settings
from ..dependencies import get_http_client
from ..models import AskResponse, ErrorResponse
from ..ratelimit import limit_expensive
from .service import OracleService
from .validation import validate_ask_payload

oracle_router = APIRouter()


@oracle_router.post(
    "/ask",
    response_model=AskResponse,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limit_expensive
async def ask(
    request: Request,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> AskResponse:
    """
    Answer a Bitcoin question through the Satoshi Oracle persona.

    Body:
        - prompt: str (required, non-blank, at most MAX_PROMPT_LENGTH chars)
        - mode: Optional[str] ("standard" or "simple")
    """
    ask_request = validate_ask_payload(payload, settings.MAX_PROMPT_LENGTH)

    answer = await OracleService(client, settings).ask(ask_request)

    return AskResponse(answer=answer)
