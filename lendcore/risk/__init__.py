"""Health factor, borrowing capacity and liquidation math."""
from .engine import RiskAssessment, RiskEngine
from .health import (
    borrow_value_usd,
    calc_health_factor,
    collateral_value_usd,
    is_liquidatable,
    max_borrow_amount,
    seize_amount,
)

__all__ = [
    "RiskAssessment",
    "RiskEngine",
    "borrow_value_usd",
    "calc_health_factor",
    "collateral_value_usd",
    "is_liquidatable",
    "max_borrow_amount",
    "seize_amount",
]
