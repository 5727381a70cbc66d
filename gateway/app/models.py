"""
Data Models Module

This module defines Pydantic models for the request/response shapes that
pass through the gateway. Nothing here is persisted.

Models are organized by functional area:
- Oracle models (ask request and answer)
- Price models (normalized bitcoin/gold/silver object)
- System models (health check, error body)
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ============================================================================
# Oracle Models
# ============================================================================

class OracleMode(str, Enum):
    """Persona variants selectable through the `mode` field."""
    STANDARD = "standard"
    SIMPLE = "simple"


class AskRequest(BaseModel):
    """Validated /api/ask payload (prompt already trimmed)."""
    prompt: str = Field(..., description="User question, trimmed", min_length=1)
    mode: OracleMode = Field(default=OracleMode.STANDARD, description="Persona variant")


class AskResponse(BaseModel):
    """Answer extracted from the chat-completion response."""
    answer: str = Field(..., description="Assistant answer, whitespace-trimmed")


# ============================================================================
# Price Models
# ============================================================================

class BitcoinPrice(BaseModel):
    usd: float = Field(..., description="Bitcoin price in US dollars")


class MetalPrice(BaseModel):
    price_per_ounce_usd: Optional[float] = Field(
        None,
        description="Spot price per troy ounce in US dollars (null when the feed failed)",
    )


class AssetPricesResponse(BaseModel):
    """Normalized response for the asset calculator."""
    bitcoin: BitcoinPrice
    gold: MetalPrice
    silver: MetalPrice


# ============================================================================
# System Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service health status")
    timestamp: str = Field(..., description="ISO-8601 UTC timestamp")


class ErrorResponse(BaseModel):
    """Error body returned by every failing route."""
    error: str = Field(..., description="Human-readable error message")
