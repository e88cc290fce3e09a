"""Admin-fed price oracle with staleness detection.

Prices are USD per unit at scale 1e7 ($1.00 == 10_000_000). An asset with
no entry is *unpriced*: ``get_price`` reports it as ``0`` and the safe
accessor refuses it.
"""
from __future__ import annotations

import logging

from ..adapters.events import publish
from ..auth import require_authorization
from ..config import AppConfig
from ..errors import AlreadyInitialized, InvalidInput, NotInitialized, PriceNotSet, StalePrice
from ..fixed_point import DEFAULT_STALENESS_THRESHOLD, PRICE_SCALE, from_usd, to_usd
from ..interfaces.clock import Clock
from ..interfaces.event_sink import EventSink
from ..models import LedgerEvent, PriceEntry

logger = logging.getLogger(__name__)


class PriceOracle:
    """Stores one ``PriceEntry`` per asset symbol, written only by the admin."""

    def __init__(self, clock: Clock, events: EventSink | None = None) -> None:
        self._clock = clock
        self._events = events
        self._admin: str | None = None
        self._staleness_threshold = DEFAULT_STALENESS_THRESHOLD
        self._prices: dict[str, PriceEntry] = {}

    @classmethod
    def from_config(
        cls, config: AppConfig, clock: Clock, events: EventSink | None = None
    ) -> PriceOracle:
        oracle = cls(clock, events)
        oracle.initialize(
            config.oracle.admin,
            staleness_threshold=config.oracle.staleness_threshold,
            stable_assets=config.oracle.stable_assets,
        )
        return oracle

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def initialize(
        self,
        admin: str,
        staleness_threshold: int = DEFAULT_STALENESS_THRESHOLD,
        stable_assets: tuple[str, ...] = ("USDC",),
    ) -> None:
        """Set the admin and seed stable assets at $1.00."""
        if self._admin is not None:
            raise AlreadyInitialized("Price oracle already initialized")
        if not admin:
            raise InvalidInput("Oracle admin must not be empty")
        if staleness_threshold < 0:
            raise InvalidInput("Staleness threshold must not be negative")

        self._admin = admin
        self._staleness_threshold = staleness_threshold
        now = self._clock.now()
        for asset in stable_assets:
            self._prices[asset] = PriceEntry(price=PRICE_SCALE, last_update_time=now)
        logger.info(
            "Price oracle initialized — admin: %s  staleness: %ds  stable: %s",
            admin,
            staleness_threshold,
            ", ".join(stable_assets) or "—",
        )

    @property
    def admin(self) -> str:
        return self._require_admin_set()

    @property
    def staleness_threshold(self) -> int:
        self._require_admin_set()
        return self._staleness_threshold

    def set_price(self, caller: str, asset: str, price: int) -> None:
        """Overwrite the price of ``asset`` and stamp it with ``now``."""
        self._store(caller, asset, price, price, "price_updated")

    def set_price_chaos(self, caller: str, asset: str, price: int) -> None:
        """Stress-test entry point: stores half of ``price`` (truncating)."""
        self._store(caller, asset, price, price // 2, "price_chaos")

    def set_staleness_threshold(self, caller: str, seconds: int) -> None:
        require_authorization(caller, self._require_admin_set())
        if seconds < 0:
            raise InvalidInput("Staleness threshold must not be negative")
        self._staleness_threshold = seconds
        logger.info("Staleness threshold set to %ds", seconds)

    def set_admin(self, caller: str, new_admin: str) -> None:
        """Hand the admin role to ``new_admin`` in one step."""
        require_authorization(caller, self._require_admin_set())
        if not new_admin:
            raise InvalidInput("New admin must not be empty")
        self._admin = new_admin
        logger.info("Oracle admin transferred from %s to %s", caller, new_admin)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_price(self, asset: str) -> int:
        """Stored price, or ``0`` when the asset is unpriced or the oracle is unset."""
        entry = self._prices.get(asset)
        return entry.price if entry else 0

    def get_last_update(self, asset: str) -> int:
        entry = self._prices.get(asset)
        return entry.last_update_time if entry else 0

    def is_stale(self, asset: str) -> bool:
        """True when the price is older than the threshold (or was never set)."""
        entry = self._prices.get(asset)
        if entry is None:
            return True
        return self._clock.now() - entry.last_update_time > self._staleness_threshold

    def get_price_safe(self, asset: str) -> int:
        """Price usable for solvency decisions: set and fresh."""
        price = self.get_price(asset)
        if price == 0:
            raise PriceNotSet(f"Price not set for {asset}")
        if self.is_stale(asset):
            age = self._clock.now() - self.get_last_update(asset)
            raise StalePrice(
                f"Price for {asset} is stale ({age}s old, threshold "
                f"{self._staleness_threshold}s)"
            )
        return price

    def asset_to_usd(self, asset: str, amount: int) -> int:
        return to_usd(amount, self.get_price(asset))

    def usd_to_asset(self, asset: str, usd_amount: int) -> int:
        price = self.get_price(asset)
        if price == 0:
            raise PriceNotSet(f"Price not set for {asset}")
        return from_usd(usd_amount, price)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_admin_set(self) -> str:
        if self._admin is None:
            raise NotInitialized("Price oracle not initialized")
        return self._admin

    def _store(self, caller: str, asset: str, price: int, stored: int, event: str) -> None:
        require_authorization(caller, self._require_admin_set())
        if price <= 0:
            raise InvalidInput(f"Price must be positive (got {price})")
        if stored <= 0:
            raise InvalidInput(f"Price {price} halves to zero")
        if not asset:
            raise InvalidInput("Asset symbol must not be empty")

        now = self._clock.now()
        self._prices[asset] = PriceEntry(price=stored, last_update_time=now)
        logger.info("Price set — %s: %d (t=%d)", asset, stored, now)

        publish(
            self._events,
            LedgerEvent(
                name=event,
                account=caller,
                amount=stored,
                timestamp=now,
                details={"asset": asset},
            ),
        )
