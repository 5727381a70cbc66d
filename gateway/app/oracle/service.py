"""
OracleService for the Venice AI chat-completion API

Builds the chat-completion request for a validated question, makes one
call, and reduces the response to the answer text.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

import httpx

from ..config import Settings
from ..errors import ConfigurationError, GatewayError, INTERNAL_ERROR_MESSAGE, UpstreamError
from ..models import AskRequest, OracleMode

logger = logging.getLogger(__name__)

UPSTREAM_ERROR_MESSAGE = "Failed to get a response from the AI. Please try again."
EMPTY_RESPONSE_MESSAGE = "Failed to get a response from the AI."
NOT_CONFIGURED_MESSAGE = "The AI service is not configured on the server."

STANDARD_SYSTEM_PROMPT = (
    "You are the Satoshi Oracle, an expert on Bitcoin, cryptography, and economics. "
    "You provide clear, direct, and insightful answers about Bitcoin and related topics."
)

SIMPLE_SYSTEM_PROMPT = (
    "You are the Satoshi Oracle, a patient guide for people who are new to Bitcoin. "
    "Explain ideas in plain language, avoid jargon, use short everyday examples, "
    "and keep answers brief."
)


@dataclass(frozen=True)
class Persona:
    system_prompt: str
    model: str


def select_persona(mode: OracleMode, settings: Settings) -> Persona:
    """Pick the system prompt and model for a mode."""
    if mode is OracleMode.SIMPLE:
        return Persona(SIMPLE_SYSTEM_PROMPT, settings.VENICE_SIMPLE_MODEL)
    return Persona(STANDARD_SYSTEM_PROMPT, settings.VENICE_MODEL)


def build_completion_payload(ask_request: AskRequest, settings: Settings) -> Dict[str, Any]:
    persona = select_persona(ask_request.mode, settings)
    return {
        "model": persona.model,
        "messages": [
            {"role": "system", "content": persona.system_prompt},
            {"role": "user", "content": ask_request.prompt},
        ],
        "max_tokens": settings.VENICE_MAX_TOKENS,
    }


def extract_answer(data: Any) -> str:
    """
    Reduce a chat-completion body to the answer text.

    Raises:
        UpstreamError: If the body carries an error or no choices
        KeyError, TypeError, AttributeError: If a choice is malformed
    """
    if not isinstance(data, dict):
        raise TypeError(f"Expected a JSON object, got {type(data).__name__}")

    choices = data.get("choices")
    if choices:
        return choices[0]["message"]["content"].strip()

    if data.get("error"):
        logger.error("Venice API error", extra={"upstream_error": str(data["error"])})
        raise UpstreamError(UPSTREAM_ERROR_MESSAGE)

    logger.error("Venice API returned no choices", extra={"upstream_keys": sorted(data.keys())})
    raise UpstreamError(EMPTY_RESPONSE_MESSAGE)


class OracleService:
    """
    Service for answering questions through Venice AI.

    One request per question; the upstream HTTP status is not consulted,
    only the JSON body.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        """
        Initialize OracleService.

        Args:
            client: Shared HTTP client for upstream calls
            settings: Application settings (API key, models, limits)
        """
        self._client = client
        self._settings = settings

    async def ask(self, ask_request: AskRequest) -> str:
        """
        Send a question to the chat-completion API and return the answer.

        Args:
            ask_request: Validated request with trimmed prompt and mode

        Returns:
            Answer text with surrounding whitespace removed

        Raises:
            ConfigurationError: If VENICE_API_KEY is not set
            UpstreamError: If the upstream call fails or returns no answer
        """
        if not self._settings.VENICE_API_KEY:
            logger.error("VENICE_API_KEY is not configured")
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

        payload = build_completion_payload(ask_request, self._settings)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._settings.VENICE_API_KEY}",
        }

        logger.info(
            "Forwarding question to Venice AI",
            extra={
                "model": payload["model"],
                "mode": ask_request.mode.value,
                "prompt_length": len(ask_request.prompt),
            },
        )

        try:
            response = await self._client.post(
                self._settings.VENICE_API_URL,
                json=payload,
                headers=headers,
            )
            return extract_answer(response.json())

        except GatewayError:
            raise

        except httpx.HTTPError as e:
            logger.error(f"Error calling Venice API: {e}", exc_info=True)
            raise UpstreamError(INTERNAL_ERROR_MESSAGE)

        except Exception as e:
            logger.error(f"Unexpected Venice API response: {e}", exc_info=True)
            raise UpstreamError(INTERNAL_ERROR_MESSAGE)
