"""Fixed-point constants and integer helpers — no I/O, no floats.

Python integers are arbitrary precision, so every multiply-before-divide
below is exact up to the final truncating division.
"""
from __future__ import annotations

# Rates, utilization and health factor: 1.0 == SCALE
SCALE = 10_000_000
# USD price per unit of asset: $1.00 == PRICE_SCALE
PRICE_SCALE = 10_000_000
# Borrow and supply indexes start at 1.0 == INDEX_SCALE
INDEX_SCALE = 1_000_000_000
# LTV, liquidation threshold and bonus: 100% == BPS
BPS = 10_000

SECONDS_PER_YEAR = 365 * 24 * 60 * 60

# Health factor reported for accounts without debt
HEALTH_FACTOR_INFINITE = 999_000_000

DEFAULT_STALENESS_THRESHOLD = 3600


def mul_div(a: int, b: int, denominator: int) -> int:
    """Return ``a * b // denominator`` with truncation toward zero.

    Amounts in the core are non-negative, so floor and truncation agree; the
    explicit sign handling keeps the helper correct for negative inputs too.
    """
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    product = a * b
    quotient = abs(product) // abs(denominator)
    if (product < 0) != (denominator < 0):
        return -quotient
    return quotient


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """Return ``a * b / denominator`` rounded up. Inputs must be non-negative."""
    if denominator <= 0:
        raise ZeroDivisionError("mul_div_up denominator must be positive")
    return -(-(a * b) // denominator)


def to_usd(amount: int, price: int) -> int:
    """Convert an asset amount to USD (scale 1e7)."""
    return mul_div(amount, price, PRICE_SCALE)


def from_usd(usd_amount: int, price: int) -> int:
    """Convert a USD amount (scale 1e7) to asset units. ``price`` must be non-zero."""
    return mul_div(usd_amount, PRICE_SCALE, price)


def format_scaled(value: int, scale: int = SCALE, places: int = 4) -> str:
    """Render a fixed-point value for log lines, e.g. ``15_000_000 -> '1.5000'``."""
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(value), scale)
    digits = len(str(scale)) - 1
    frac_str = str(frac).rjust(digits, "0")[:places].ljust(places, "0")
    return f"{sign}{whole}.{frac_str}"
