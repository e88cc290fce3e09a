"""Kinked (two-slope) interest rate model.

Below the optimal utilization the borrow rate climbs gently along
``slope1``; above it the excess utilization is charged along the much
steeper ``slope2``::

    u <= optimal:  rate = base + u * slope1 / optimal
    u >  optimal:  excess = (u - optimal) * SCALE / (SCALE - optimal)
                   rate = base + slope1 + excess * slope2 / SCALE

All values are scale 1e7 (``SCALE`` == 100%). Divisions truncate.
"""
from __future__ import annotations

import logging

from ..config import AppConfig
from ..errors import AlreadyInitialized, InvalidInput, NotInitialized
from ..fixed_point import SCALE
from ..models import RateCurveParameters

logger = logging.getLogger(__name__)

DEFAULT_RATE_CURVE = RateCurveParameters(
    base_rate=0,
    slope1=400_000,
    slope2=7_500_000,
    optimal_utilization=8_000_000,
)


def utilization(total_borrows: int, total_deposits: int) -> int:
    """Fraction of deposits currently borrowed, scale 1e7 (0 for an empty pool)."""
    if total_deposits <= 0:
        return 0
    return total_borrows * SCALE // total_deposits


def kinked_borrow_rate(params: RateCurveParameters, utilization_rate: int) -> int:
    """Annual borrow rate for ``utilization_rate`` under ``params``."""
    optimal = params.optimal_utilization
    if utilization_rate <= optimal:
        return params.base_rate + utilization_rate * params.slope1 // optimal
    excess = (utilization_rate - optimal) * SCALE // (SCALE - optimal)
    return params.base_rate + params.slope1 + excess * params.slope2 // SCALE


class InterestRateModel:
    """Stores the curve parameters once and prices utilization against them."""

    def __init__(self) -> None:
        self._params: RateCurveParameters | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> InterestRateModel:
        model = cls()
        model.initialize(config.rate_curve)
        return model

    def initialize(self, params: RateCurveParameters) -> None:
        if self._params is not None:
            raise AlreadyInitialized("Interest rate model already initialized")
        params.validate()

        self._params = params
        logger.info(
            "Rate curve set — base: %d  slope1: %d  slope2: %d  optimal: %d",
            params.base_rate,
            params.slope1,
            params.slope2,
            params.optimal_utilization,
        )

    def initialize_default(self) -> None:
        """Initialize with 0% base, 4% slope1, 75% slope2 and an 80% kink."""
        self.initialize(DEFAULT_RATE_CURVE)

    @property
    def is_initialized(self) -> bool:
        return self._params is not None

    @property
    def parameters(self) -> RateCurveParameters:
        if self._params is None:
            raise NotInitialized("Interest rate model not initialized")
        return self._params

    def get_borrow_rate(self, utilization_rate: int) -> int:
        """Annualized borrow rate (scale 1e7) at ``utilization_rate``."""
        if utilization_rate < 0:
            raise InvalidInput(f"Utilization must not be negative (got {utilization_rate})")
        return kinked_borrow_rate(self.parameters, utilization_rate)

    def get_supply_rate(self, utilization_rate: int) -> int:
        """Annualized supply rate: borrow rate scaled by utilization.

        No reserve factor is taken, so suppliers receive all borrower interest.
        """
        return self.get_borrow_rate(utilization_rate) * utilization_rate // SCALE
