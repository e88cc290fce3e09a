"""Pyth Network price feed for the keeper."""
from __future__ import annotations

import logging
import ssl

import aiohttp
import certifi

from ..config import PythConfig
from ..fixed_point import PRICE_SCALE, format_scaled

logger = logging.getLogger(__name__)

# Decimal places of PRICE_SCALE (1e7)
_PRICE_DECIMALS = len(str(PRICE_SCALE)) - 1


def scale_pyth_price(price_raw: int, expo: int) -> int:
    """Convert Pyth's ``price * 10**expo`` to scale 1e7 with integer math.

    Examples:
        (350000000, -8) -> 35_000_000   ($3.50)
        (100000000, -8) -> 10_000_000   ($1.00)
    """
    shift = _PRICE_DECIMALS + expo
    if shift >= 0:
        return price_raw * 10**shift
    return price_raw // 10**(-shift)


class PythPriceFeed:
    """Fetch prices from the Pyth Hermes REST endpoint."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, int]:
        """Fetch current prices (scale 1e7) from Pyth Network.

        Args:
            symbols: Optional list of symbols to fetch. If None, fetches all
                     configured feeds.
        """
        prices: dict[str, int] = {}

        feeds = self.price_feeds
        if symbols is not None:
            feeds = {k: v for k, v in self.price_feeds.items() if k in symbols}

        feed_ids = list(set(feeds.values()))
        if not feed_ids:
            return prices

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return prices

                    data = await response.json()
                    parsed = data.get("parsed", [])

                    # Reverse mapping from feed ID to asset symbols
                    id_to_assets: dict[str, list[str]] = {}
                    for asset, feed_id in feeds.items():
                        id_to_assets.setdefault(feed_id, []).append(asset)

                    for item in parsed:
                        feed_id = item.get("id")
                        price_data = item.get("price", {})
                        price = scale_pyth_price(
                            int(price_data.get("price", 0)),
                            int(price_data.get("expo", 0)),
                        )

                        for asset in id_to_assets.get(feed_id, []):
                            prices[asset] = price

                    logger.info("Fetched prices from Pyth Network:")
                    for asset, price in sorted(prices.items()):
                        logger.info("  %s: $%s", asset, format_scaled(price, PRICE_SCALE))

        except Exception as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return prices
