"""
Ask payload validation.

Runs before any upstream call; every rejection is an InvalidRequestError
(HTTP 400).
"""

import logging
from typing import Any, Dict, Optional

from ..errors import InvalidRequestError
from ..models import AskRequest, OracleMode

logger = logging.getLogger(__name__)

PROMPT_REQUIRED_MESSAGE = "A valid prompt is required."
MODE_INVALID_MESSAGE = "Mode must be a string."


def prompt_too_long_message(max_length: int) -> str:
    return f"Prompt is too long. Please keep it under {max_length} characters."


def resolve_mode(mode: Any) -> OracleMode:
    """
    Map the raw `mode` field to a persona.

    Matching is case-insensitive; absent or unknown values fall back to
    the standard persona.
    """
    if mode is None:
        return OracleMode.STANDARD

    if not isinstance(mode, str):
        raise InvalidRequestError(MODE_INVALID_MESSAGE)

    try:
        return OracleMode(mode.strip().lower())
    except ValueError:
        logger.debug("Unknown mode requested, using standard", extra={"mode": mode[:32]})
        return OracleMode.STANDARD


def validate_ask_payload(payload: Optional[Dict[str, Any]], max_length: int) -> AskRequest:
    """
    Validate a raw /api/ask body and return the trimmed request.

    Args:
        payload: Parsed JSON body (None when the body was empty)
        max_length: Maximum prompt length, checked before trimming

    Returns:
        AskRequest with the trimmed prompt and resolved mode

    Raises:
        InvalidRequestError: If the prompt is missing, not a string, blank,
            too long, or the mode is not a string
    """
    payload = payload or {}
    prompt = payload.get("prompt")

    if not isinstance(prompt, str) or not prompt.strip():
        raise InvalidRequestError(PROMPT_REQUIRED_MESSAGE)

    if len(prompt) > max_length:
        raise InvalidRequestError(prompt_too_long_message(max_length))

    mode = resolve_mode(payload.get("mode"))

    return AskRequest(prompt=prompt.strip(), mode=mode)
