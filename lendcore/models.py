"""Data models — all frozen (immutable), replaced wholesale on commit."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import InvalidInput
from .fixed_point import BPS, INDEX_SCALE, SCALE


@dataclass(frozen=True)
class PoolState:
    """Pool-wide totals and interest indexes.

    ``borrow_shares`` and ``deposit_shares`` are the sums of the account
    shares. ``total_borrows`` is always ``borrow_shares`` valued at
    ``borrow_index``, so no account can owe more than the pool total.
    ``total_deposits`` counts principal plus credited interest.
    """

    total_deposits: int = 0
    total_borrows: int = 0
    borrow_index: int = INDEX_SCALE
    supply_index: int = INDEX_SCALE
    last_accrual_time: int = 0
    deposit_shares: int = 0
    borrow_shares: int = 0

    @property
    def available_liquidity(self) -> int:
        return self.total_deposits - self.total_borrows


@dataclass(frozen=True)
class Account:
    """Per-participant balances.

    Deposits and debt are held as shares of the supply and borrow indexes
    (amount * INDEX_SCALE / index); collateral earns nothing and is held as
    a plain amount.
    """

    deposit_shares: int = 0
    borrow_shares: int = 0
    collateral_balance: int = 0

    @property
    def is_empty(self) -> bool:
        return (
            self.deposit_shares == 0
            and self.borrow_shares == 0
            and self.collateral_balance == 0
        )


@dataclass(frozen=True)
class RiskParameters:
    """LTV, liquidation threshold and liquidation bonus in basis points."""

    ltv_ratio: int = 7500
    liquidation_threshold: int = 8000
    liquidation_bonus: int = 0

    def validate(self) -> None:
        """Raise ``InvalidInput`` unless 0 < ltv < liquidation threshold < 100%."""
        if not 0 < self.ltv_ratio < self.liquidation_threshold < BPS:
            raise InvalidInput(
                f"Invalid risk parameters: need 0 < ltv_ratio ({self.ltv_ratio}) < "
                f"liquidation_threshold ({self.liquidation_threshold}) < {BPS}"
            )
        if not 0 <= self.liquidation_bonus < BPS:
            raise InvalidInput(
                f"Invalid liquidation_bonus {self.liquidation_bonus}: must be in [0, {BPS})"
            )


@dataclass(frozen=True)
class RateCurveParameters:
    """Kinked rate curve parameters, all at scale 1e7."""

    base_rate: int = 0
    slope1: int = 400_000
    slope2: int = 7_500_000
    optimal_utilization: int = 8_000_000

    def validate(self) -> None:
        """Raise ``InvalidInput`` unless 0 < optimal < SCALE and nothing is negative."""
        if not 0 < self.optimal_utilization < SCALE:
            raise InvalidInput(
                f"Invalid optimal_utilization {self.optimal_utilization}: "
                f"must be in (0, {SCALE})"
            )
        if min(self.base_rate, self.slope1, self.slope2) < 0:
            raise InvalidInput("Rate curve parameters must not be negative")


@dataclass(frozen=True)
class PriceEntry:
    """Stored USD price (scale 1e7) and the time it was written."""

    price: int
    last_update_time: int


class SimulatedAction(Enum):
    """Balance changes a health-factor simulation can apply."""

    DEPOSIT_COLLATERAL = "deposit_collateral"
    WITHDRAW_COLLATERAL = "withdraw_collateral"
    BORROW = "borrow"
    REPAY = "repay"


@dataclass(frozen=True)
class PositionSnapshot:
    """Read model of one account with interest previewed to ``now``."""

    account: str
    deposit_balance: int
    borrow_balance: int
    collateral_balance: int
    collateral_value_usd: int
    borrow_value_usd: int
    max_borrow: int
    health_factor: int

    @property
    def is_liquidatable(self) -> bool:
        return self.health_factor < SCALE

    @property
    def ltv(self) -> int:
        """Current loan-to-value in basis points (0 without collateral)."""
        if self.collateral_value_usd <= 0:
            return 0
        return self.borrow_value_usd * BPS // self.collateral_value_usd


@dataclass(frozen=True)
class LiquidationResult:
    """Outcome of a successful liquidation."""

    borrower: str
    liquidator: str
    debt_repaid: int
    collateral_seized: int


@dataclass(frozen=True)
class LedgerEvent:
    """Fire-and-forget notification emitted after a committed operation."""

    name: str
    account: str
    amount: int
    timestamp: int
    details: dict[str, Any] = field(default_factory=dict)
