"""Price feed protocol — off-chain price source for the keeper."""
from typing import Protocol


class PriceFeed(Protocol):
    """Abstract interface for fetching USD prices at scale 1e7."""

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, int]: ...
