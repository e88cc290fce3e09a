"""Price keeper — pushes off-chain prices into the oracle and flags liquidations."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ..config import AppConfig, KeeperConfig
from ..errors import LendingError
from ..fixed_point import PRICE_SCALE, format_scaled
from ..interfaces.price_feed import PriceFeed
from ..logging_setup import configure_logging
from ..models import PositionSnapshot
from ..oracles.ledger_oracle import PriceOracle
from ..oracles.pyth import PythPriceFeed
from ..pool.ledger import LendingPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeeperReport:
    """Outcome of one keeper cycle."""

    updated: dict[str, int] = field(default_factory=dict)
    skipped: tuple[str, ...] = ()
    liquidatable: tuple[PositionSnapshot, ...] = ()


class PriceKeeper:
    """Feeds the oracle from a ``PriceFeed`` on a fixed interval."""

    def __init__(
        self,
        config: KeeperConfig,
        oracle: PriceOracle,
        feed: PriceFeed,
        admin: str,
        pool: LendingPool | None = None,
    ) -> None:
        self._config = config
        self._oracle = oracle
        self._feed = feed
        self._admin = admin
        self._pool = pool

    @classmethod
    def from_config(
        cls, config: AppConfig, oracle: PriceOracle, pool: LendingPool | None = None
    ) -> PriceKeeper:
        return cls(
            config.keeper,
            oracle,
            PythPriceFeed(config.keeper.pyth),
            config.oracle.admin,
            pool,
        )

    @property
    def symbols(self) -> list[str]:
        return sorted(self._config.pyth.feeds)

    async def run_once(self) -> KeeperReport:
        """Fetch, store and scan once."""
        symbols = self.symbols
        prices = await self._feed.fetch_prices(symbols)

        updated: dict[str, int] = {}
        skipped: list[str] = []
        for symbol in symbols:
            price = prices.get(symbol, 0)
            if price <= 0:
                logger.warning("No usable price for %s this cycle", symbol)
                skipped.append(symbol)
                continue
            try:
                self._oracle.set_price(self._admin, symbol, price)
            except LendingError as e:
                logger.error("Failed to store price for %s: %s", symbol, e)
                skipped.append(symbol)
                continue
            updated[symbol] = price

        liquidatable = self._scan()

        logger.info(
            "Keeper cycle done — updated: %d  skipped: %d  liquidatable: %d",
            len(updated),
            len(skipped),
            len(liquidatable),
        )
        return KeeperReport(
            updated=updated,
            skipped=tuple(skipped),
            liquidatable=tuple(liquidatable),
        )

    def _scan(self) -> list[PositionSnapshot]:
        if self._pool is None:
            return []
        try:
            positions = self._pool.liquidatable_accounts()
        except LendingError as e:
            logger.error("Liquidation scan failed: %s", e)
            return []

        for position in positions:
            logger.warning(
                "Liquidatable — %s: HF %s  collateral $%s  debt $%s",
                position.account,
                format_scaled(position.health_factor),
                format_scaled(position.collateral_value_usd, PRICE_SCALE, 2),
                format_scaled(position.borrow_value_usd, PRICE_SCALE, 2),
            )
        return positions

    async def run_continuous(self, interval_seconds: int | None = None) -> None:
        """Run keeper cycles forever."""
        interval = interval_seconds or self._config.interval_seconds
        logger.info("Starting price keeper (every %d seconds)", interval)

        while True:
            try:
                await self.run_once()
            except Exception as e:
                logger.error("Error in keeper loop: %s", e)
            await asyncio.sleep(interval)


async def run_keeper(
    config: AppConfig,
    oracle: PriceOracle,
    pool: LendingPool | None = None,
    log_level: str = "INFO",
) -> None:
    """Host entry point: configure logging, then run the keeper loop."""
    configure_logging(log_level)
    if not config.keeper.enabled:
        logger.info("Price keeper disabled in configuration")
        return

    keeper = PriceKeeper.from_config(config, oracle, pool)
    await keeper.run_continuous()
