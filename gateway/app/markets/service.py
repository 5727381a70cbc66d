"""
Price Feed Service

Wraps the three price providers behind the market endpoints:

- CoinGecko: bitcoin market data, passed through untouched
- Twelve Data: bitcoin and gold prices (required)
- FCSAPI: silver price (optional, degrades to null)

Calls are made one after another on the shared HTTP client.
"""

import logging
import math
from typing import Any, Dict, Optional

import httpx

from ..config import Settings
from ..errors import ConfigurationError, GatewayError, UpstreamError
from ..models import AssetPricesResponse, BitcoinPrice, MetalPrice

logger = logging.getLogger(__name__)

MARKET_DATA_ERROR_MESSAGE = "Failed to fetch market data."
KEYS_MISSING_MESSAGE = "API keys are not configured on the server."
TWELVEDATA_ERROR_MESSAGE = "Failed to fetch data from Twelve Data."
ASSET_PRICES_ERROR_MESSAGE = "An internal server error occurred while fetching asset prices."

BITCOIN_SYMBOL = "BTC/USD"
GOLD_SYMBOL = "XAU/USD"
SILVER_SYMBOL = "XAGUSD"

COINGECKO_PRICE_PARAMS = {
    "ids": "bitcoin",
    "vs_currencies": "usd",
    "include_market_cap": "true",
    "include_24hr_change": "true",
    "include_last_updated_at": "true",
}


def parse_price(value: Any) -> float:
    """
    Parse a provider price (number or numeric string) into a float.

    Raises:
        ValueError: If the value is missing, not numeric, or not finite
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Not a price: {value!r}")

    price = float(value)
    if not math.isfinite(price):
        raise ValueError(f"Not a finite price: {value!r}")
    return price


def parse_twelvedata_prices(data: Any) -> Dict[str, float]:
    """
    Pull bitcoin and gold prices out of a Twelve Data batch /price body.

    Body shape: {"BTC/USD": {"price": "67000.1"}, "XAU/USD": {"price": "2400.5"}}

    Raises:
        UpstreamError: If the body reports status "error"
        KeyError, TypeError, ValueError: If a price is missing or malformed
    """
    if isinstance(data, dict) and data.get("status") == "error":
        logger.error("Twelve Data API error", extra={"upstream_error": data.get("message")})
        raise UpstreamError(TWELVEDATA_ERROR_MESSAGE)

    return {
        "bitcoin": parse_price(data[BITCOIN_SYMBOL]["price"]),
        "gold": parse_price(data[GOLD_SYMBOL]["price"]),
    }


def parse_fcsapi_price(data: Any) -> Optional[float]:
    """
    Pull the silver price out of an FCSAPI /forex/latest body.

    Body shape: {"status": true, "response": [{"price": "30.12", ...}]}. Older
    deployments answered with status "ok"; both are accepted.

    Returns:
        Price per ounce, or None when the body is unusable
    """
    if not isinstance(data, dict):
        logger.warning("FCSAPI returned a non-object body")
        return None

    if data.get("status") not in ("ok", True):
        logger.warning(
            "FCSAPI error, proceeding with null silver price",
            extra={"upstream_status": data.get("status"), "upstream_message": data.get("msg")},
        )
        return None

    rows = data.get("response")
    if not isinstance(rows, list) or not rows:
        logger.warning("FCSAPI returned no rows, proceeding with null silver price")
        return None

    try:
        return parse_price(rows[0]["price"])
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"FCSAPI price unreadable, proceeding with null silver price: {e}")
        return None


class PriceService:
    """
    Fetches and normalizes prices from the upstream feeds.

    No retries and no caching: each call hits the providers once.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self._client = client
        self._settings = settings

    async def market_data(self) -> Any:
        """
        Return CoinGecko's simple/price body for bitcoin unchanged.

        Raises:
            UpstreamError: If the call fails or the body is not JSON
        """
        headers = {}
        if self._settings.COINGECKO_API_KEY:
            headers["x-cg-demo-api-key"] = self._settings.COINGECKO_API_KEY

        try:
            response = await self._client.get(
                f"{self._settings.COINGECKO_API_URL.rstrip('/')}/simple/price",
                params=COINGECKO_PRICE_PARAMS,
                headers=headers,
            )
            return response.json()
        except Exception as e:
            logger.error(f"Error calling CoinGecko API: {e}", exc_info=True)
            raise UpstreamError(MARKET_DATA_ERROR_MESSAGE)

    async def _twelvedata_prices(self) -> Dict[str, float]:
        response = await self._client.get(
            f"{self._settings.TWELVEDATA_API_URL.rstrip('/')}/price",
            params={
                "symbol": f"{BITCOIN_SYMBOL},{GOLD_SYMBOL}",
                "apikey": self._settings.TWELVEDATA_API_KEY,
            },
        )
        response.raise_for_status()
        return parse_twelvedata_prices(response.json())

    async def _silver_price(self) -> Optional[float]:
        """Silver price from FCSAPI, or None on any failure."""
        try:
            response = await self._client.get(
                f"{self._settings.FCSAPI_API_URL.rstrip('/')}/forex/latest",
                params={
                    "symbol": SILVER_SYMBOL,
                    "access_key": self._settings.FCSAPI_API_KEY,
                },
            )
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            logger.warning(f"FCSAPI request failed, proceeding with null silver price: {e}")
            return None

        return parse_fcsapi_price(data)

    async def asset_prices(self) -> AssetPricesResponse:
        """
        Build the bitcoin/gold/silver object for the asset calculator.

        Twelve Data is required; FCSAPI failures leave silver as null.

        Raises:
            ConfigurationError: If either API key is missing
            UpstreamError: If Twelve Data fails or answers with an error
        """
        if not self._settings.asset_price_keys_configured:
            logger.error("TWELVEDATA_API_KEY or FCSAPI_API_KEY is not configured")
            raise ConfigurationError(KEYS_MISSING_MESSAGE)

        try:
            prices = await self._twelvedata_prices()
        except GatewayError:
            raise
        except Exception as e:
            logger.error(f"Error in /api/asset-prices: {e}", exc_info=True)
            raise UpstreamError(ASSET_PRICES_ERROR_MESSAGE)

        silver = await self._silver_price()

        return AssetPricesResponse(
            bitcoin=BitcoinPrice(usd=prices["bitcoin"]),
            gold=MetalPrice(price_per_ounce_usd=prices["gold"]),
            silver=MetalPrice(price_per_ounce_usd=silver),
        )
