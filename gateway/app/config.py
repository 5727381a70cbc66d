"""
Configuration module for the Satoshi Oracle Gateway.

This module uses Pydantic Settings to load and validate environment variables
for the upstream providers (Venice AI, CoinGecko, Twelve Data, FCSAPI), rate
limiting, CORS and the server itself.

Environment variables are loaded from .env file or system environment.
Every upstream key is optional at load time so the service can start and
serve /api/health; routes that need a missing key answer with a 500.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from limits import parse_many


DEFAULT_ALLOWED_ORIGINS = ",".join([
    "https://www.satsofbitcoin.com",
    "https://satsofbitcoin.com",
    "https://satsofbitcoin-frontend.vercel.app",
    "http://localhost:3000",
])


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Upstream credentials, rate limit tiers and server options are
    defined here.
    """

    # =========================================================================
    # Venice AI (chat completions)
    # =========================================================================

    VENICE_API_KEY: Optional[str] = Field(
        None,
        description="Bearer token for the Venice AI chat-completion API",
    )

    VENICE_API_URL: str = Field(
        default="https://api.venice.ai/api/v1/chat/completions",
        description="Full URL of the chat-completion endpoint",
    )

    VENICE_MODEL: str = Field(
        default="llama-3.3-70b",
        description="Model used for the standard oracle persona",
    )

    VENICE_SIMPLE_MODEL: str = Field(
        default="llama-3.2-3b",
        description="Model used for the plain-language (simple) persona",
    )

    VENICE_MAX_TOKENS: int = Field(
        default=500,
        description="max_tokens sent with every chat completion",
        ge=1,
    )

    MAX_PROMPT_LENGTH: int = Field(
        default=1000,
        description="Maximum prompt length in characters (measured before trimming)",
        ge=1,
    )

    # =========================================================================
    # Price providers
    # =========================================================================

    COINGECKO_API_KEY: Optional[str] = Field(
        None,
        description="CoinGecko demo API key (x-cg-demo-api-key header)",
    )

    COINGECKO_API_URL: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL",
    )

    TWELVEDATA_API_KEY: Optional[str] = Field(
        None,
        description="Twelve Data API key (bitcoin and gold prices)",
    )

    TWELVEDATA_API_URL: str = Field(
        default="https://api.twelvedata.com",
        description="Twelve Data API base URL",
    )

    FCSAPI_API_KEY: Optional[str] = Field(
        None,
        description="FCSAPI access key (silver price)",
    )

    FCSAPI_API_URL: str = Field(
        default="https://fcsapi.com/api-v3",
        description="FCSAPI base URL",
    )

    # =========================================================================
    # Rate Limiting
    # =========================================================================

    GENERAL_RATE_LIMIT: str = Field(
        default="100/15 minutes",
        description="Limit shared by every route, per client IP",
    )

    ASK_RATE_LIMIT: str = Field(
        default="20/15 minutes",
        description="Additional limit on /api/ask, per client IP",
    )

    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Disable to turn the rate limiter off entirely",
    )

    RATE_LIMIT_STORAGE_URI: str = Field(
        default="memory://",
        description="Storage backend for rate limit counters",
    )

    TRUST_PROXY_HOPS: int = Field(
        default=1,
        description="Number of reverse proxies whose X-Forwarded-For entries are trusted",
        ge=0,
        le=10,
    )

    # =========================================================================
    # Server / CORS / Logging
    # =========================================================================

    ALLOWED_ORIGINS: str = Field(
        default=DEFAULT_ALLOWED_ORIGINS,
        description="Comma-separated list of allowed CORS origins",
    )

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the gateway server",
    )

    PORT: int = Field(
        default=3001,
        description="Port to bind the gateway server",
        ge=1,
        le=65535,
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse and return ALLOWED_ORIGINS as a list.

        Returns:
            List of allowed origin URLs, or empty list if not configured.
        """
        if not self.ALLOWED_ORIGINS:
            return []

        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    @property
    def asset_price_keys_configured(self) -> bool:
        """Both price feeds behind /api/asset-prices have credentials."""
        return bool(self.TWELVEDATA_API_KEY and self.FCSAPI_API_KEY)

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("GENERAL_RATE_LIMIT", "ASK_RATE_LIMIT")
    @classmethod
    def validate_rate_limit(cls, v: str) -> str:
        """
        Validate that a rate limit string can be parsed.

        Accepts the `limits` notation, e.g. "100/15 minutes" or "20 per hour".

        Raises:
            ValueError: If the string is not a valid rate limit
        """
        try:
            parsed = parse_many(v)
        except ValueError:
            raise ValueError(f"Invalid rate limit: '{v}'. Expected e.g. '100/15 minutes'")

        if not parsed:
            raise ValueError(f"Invalid rate limit: '{v}'. Expected e.g. '100/15 minutes'")

        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate the log level is one the logging module knows.

        Raises:
            ValueError: If the level is not supported
        """
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        if v.upper() not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )

        return v.upper()


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    Cached so the environment is read once per process. Routes receive it
    through FastAPI dependency injection, which lets tests override it.

    Returns:
        Settings instance with all configuration loaded and validated.

    Raises:
        ValidationError: If an environment variable is present but invalid.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Settings) -> dict:
    """
    Check which upstream credentials are present and return a status report.

    Called during application startup; missing keys are warnings because
    the gateway still serves the routes that do not need them.

    Returns:
        Dictionary with validation status and any warnings.

    Example:
        >>> status = validate_configuration(get_settings())
        >>> status["warnings"]
        ['VENICE_API_KEY is not set (/api/ask will fail)', ...]
    """
    warnings = []

    if not settings.VENICE_API_KEY:
        warnings.append("VENICE_API_KEY is not set (/api/ask will fail)")

    if not settings.COINGECKO_API_KEY:
        warnings.append("COINGECKO_API_KEY is not set (CoinGecko may reject /api/market-data)")

    if not settings.TWELVEDATA_API_KEY:
        warnings.append("TWELVEDATA_API_KEY is not set (/api/asset-prices will fail)")

    if not settings.FCSAPI_API_KEY:
        warnings.append("FCSAPI_API_KEY is not set (/api/asset-prices will fail)")

    if not settings.allowed_origins_list:
        warnings.append("ALLOWED_ORIGINS is empty (browsers will be blocked by CORS)")

    return {
        "valid": not warnings,
        "warnings": warnings,
        "allowed_origins": settings.allowed_origins_list,
        "rate_limits": {
            "general": settings.GENERAL_RATE_LIMIT,
            "ask": settings.ASK_RATE_LIMIT,
        },
    }
