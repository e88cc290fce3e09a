"""Interest rate curve and index-based accrual."""
from .accrual import (
    InterestAccrualEngine,
    borrow_shares_for,
    current_debt,
    current_deposit,
    deposit_shares_for,
    repay_shares_for,
    with_borrow_shares,
    withdraw_shares_for,
)
from .rate_model import DEFAULT_RATE_CURVE, InterestRateModel, kinked_borrow_rate, utilization

__all__ = [
    "DEFAULT_RATE_CURVE",
    "InterestAccrualEngine",
    "InterestRateModel",
    "borrow_shares_for",
    "current_debt",
    "current_deposit",
    "deposit_shares_for",
    "kinked_borrow_rate",
    "repay_shares_for",
    "utilization",
    "with_borrow_shares",
    "withdraw_shares_for",
]
