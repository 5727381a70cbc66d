"""
Satoshi Oracle Gateway
======================

HTTP gateway between the satsofbitcoin.com frontend and the upstream APIs
it relies on: Venice AI for chat completions, CoinGecko for bitcoin market
data, and Twelve Data / FCSAPI for asset prices.

Packages:
- oracle: /api/ask question answering
- markets: /api/market-data and /api/asset-prices

The application object lives in gateway.app.main.
"""
