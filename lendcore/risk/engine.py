"""Risk engine — borrowing capacity, health factor and liquidation quotes."""
from __future__ import annotations

from dataclasses import dataclass

from ..errors import PriceNotSet
from ..models import RiskParameters
from ..oracles.ledger_oracle import PriceOracle
from . import health


@dataclass(frozen=True)
class RiskAssessment:
    """Valuation of one (possibly hypothetical) position."""

    collateral_value_usd: int
    borrow_value_usd: int
    max_borrow: int
    health_factor: int

    @property
    def is_liquidatable(self) -> bool:
        return health.is_liquidatable(self.health_factor)


class RiskEngine:
    """Values positions against oracle prices; owns no ledger state.

    ``strict`` evaluations back solvency decisions and require fresh prices
    (``get_price_safe``). Non-strict evaluations back read-only queries and
    accept whatever price is stored, failing only when a price they divide
    by is missing.
    """

    def __init__(
        self,
        oracle: PriceOracle,
        collateral_asset: str,
        borrow_asset: str,
        params: RiskParameters,
    ) -> None:
        params.validate()
        self._oracle = oracle
        self.collateral_asset = collateral_asset
        self.borrow_asset = borrow_asset
        self._params = params

    @property
    def parameters(self) -> RiskParameters:
        return self._params

    @parameters.setter
    def parameters(self, params: RiskParameters) -> None:
        params.validate()
        self._params = params

    def prices(self, strict: bool) -> tuple[int, int]:
        """Return ``(collateral_price, borrow_price)``."""
        if strict:
            return (
                self._oracle.get_price_safe(self.collateral_asset),
                self._oracle.get_price_safe(self.borrow_asset),
            )
        return (
            self._oracle.get_price(self.collateral_asset),
            self._oracle.get_price(self.borrow_asset),
        )

    def assess(self, collateral: int, debt: int, strict: bool = True) -> RiskAssessment:
        """Value a position holding ``collateral`` and owing ``debt``."""
        collateral_price, borrow_price = self.prices(strict)
        if borrow_price == 0 and debt > 0:
            raise PriceNotSet(f"Price not set for {self.borrow_asset}")

        collateral_usd = health.collateral_value_usd(collateral, collateral_price)
        debt_usd = health.borrow_value_usd(debt, borrow_price)
        max_borrow = (
            health.max_borrow_amount(collateral_usd, self._params.ltv_ratio, borrow_price)
            if borrow_price
            else 0
        )
        return RiskAssessment(
            collateral_value_usd=collateral_usd,
            borrow_value_usd=debt_usd,
            max_borrow=max_borrow,
            health_factor=health.calc_health_factor(
                collateral_usd, debt_usd, self._params.liquidation_threshold
            ),
        )

    def max_borrow(self, collateral: int, strict: bool = True) -> int:
        return self.assess(collateral, 0, strict).max_borrow

    def health_factor(self, collateral: int, debt: int, strict: bool = True) -> int:
        return self.assess(collateral, debt, strict).health_factor

    def liquidation_seizure(self, collateral: int, debt: int) -> int:
        """Collateral a full-repayment liquidation of ``debt`` hands over (fresh prices)."""
        collateral_price, borrow_price = self.prices(strict=True)
        return health.seize_amount(
            health.borrow_value_usd(debt, borrow_price),
            self._params.liquidation_bonus,
            collateral_price,
            collateral,
        )
