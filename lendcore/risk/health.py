"""Pure solvency math — fixed-point integers in, fixed-point integers out."""
from __future__ import annotations

from ..fixed_point import BPS, HEALTH_FACTOR_INFINITE, SCALE, from_usd, mul_div, to_usd


def collateral_value_usd(collateral: int, collateral_price: int) -> int:
    """USD value of a collateral balance (scale 1e7)."""
    return to_usd(collateral, collateral_price)


def borrow_value_usd(debt: int, borrow_price: int) -> int:
    """USD value of a debt balance (scale 1e7)."""
    return to_usd(debt, borrow_price)


def max_borrow_usd(collateral_usd: int, ltv_ratio: int) -> int:
    return mul_div(collateral_usd, ltv_ratio, BPS)


def max_borrow_amount(collateral_usd: int, ltv_ratio: int, borrow_price: int) -> int:
    """Borrowing capacity in borrow-asset units."""
    return from_usd(max_borrow_usd(collateral_usd, ltv_ratio), borrow_price)


def calc_health_factor(
    collateral_usd: int, debt_usd: int, liquidation_threshold: int
) -> int:
    """Health factor at scale 1e7.

    health_factor = (collateral_usd * liquidation_threshold / BPS) / debt_usd

    A position without (measurable) debt reports ``HEALTH_FACTOR_INFINITE``.
    """
    if debt_usd <= 0:
        return HEALTH_FACTOR_INFINITE
    return collateral_usd * liquidation_threshold * SCALE // (BPS * debt_usd)


def is_liquidatable(health_factor: int) -> bool:
    """Strictly below 1.0; exactly 1.0 is still safe."""
    return health_factor < SCALE


def seize_amount(
    debt_usd: int,
    liquidation_bonus: int,
    collateral_price: int,
    collateral_balance: int,
) -> int:
    """Collateral handed to a liquidator repaying ``debt_usd`` of debt.

    The liquidator receives the repaid value plus the bonus, converted to
    collateral units and capped at what the borrower holds.
    """
    reward_usd = mul_div(debt_usd, BPS + liquidation_bonus, BPS)
    return min(collateral_balance, from_usd(reward_usd, collateral_price))
