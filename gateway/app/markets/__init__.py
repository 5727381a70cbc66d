"""
Markets Package
===============

Price endpoints backed by CoinGecko, Twelve Data and FCSAPI.

Modules:
- routes: /market-data and /asset-prices endpoints
- service: Upstream calls and payload normalization
"""

from .routes import markets_router

__all__ = [
    "markets_router",
]
