"""
Market Routes - Price Feed Forwarding
=====================================

Endpoints:
----------
- GET /market-data: CoinGecko bitcoin price body, passed through
- GET /asset-prices: Normalized bitcoin/gold/silver prices

Both routes count against the general rate limit tier only.
"""

from typing import Any

import httpx
from fastapi import APIRouter, Depends, Request

from ..config import Settings, get_settings
from ..dependencies import get_http_client
from ..models import AssetPricesResponse, ErrorResponse
from ..ratelimit import limit_general
from .service import PriceService

markets_router = APIRouter()


def get_price_service(
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> PriceService:
    return PriceService(client, settings)


@markets_router.get(
    "/market-data",
    responses={429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limit_general
async def market_data(
    request: Request,
    service: PriceService = Depends(get_price_service),
) -> Any:
    """Bitcoin price, market cap, 24h change and last-updated time from CoinGecko."""
    return await service.market_data()


@markets_router.get(
    "/asset-prices",
    response_model=AssetPricesResponse,
    responses={429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limit_general
async def asset_prices(
    request: Request,
    service: PriceService = Depends(get_price_service),
) -> AssetPricesResponse:
    """
    Prices for the asset calculator.

    silver.price_per_ounce_usd is null when the silver feed is unavailable.
    """
    return await service.asset_prices()
