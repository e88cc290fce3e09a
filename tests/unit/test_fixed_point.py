"""Unit tests for fixed-point helpers."""
from __future__ import annotations

import pytest

from lendcore.fixed_point import PRICE_SCALE, format_scaled, from_usd, mul_div, mul_div_up, to_usd


class TestMulDiv:
    def test_truncates(self) -> None:
        assert mul_div(10, 3, 4) == 7

    def test_truncates_toward_zero_for_negatives(self) -> None:
        assert mul_div(-10, 3, 4) == -7

    def test_large_intermediate_is_exact(self) -> None:
        big = 2**120
        assert mul_div(big, 10**18, 10**18) == big

    def test_zero_denominator(self) -> None:
        with pytest.raises(ZeroDivisionError):
            mul_div(1, 1, 0)


class TestMulDivUp:
    def test_rounds_up(self) -> None:
        assert mul_div_up(10, 3, 4) == 8

    def test_exact_quotient_unchanged(self) -> None:
        assert mul_div_up(10, 2, 4) == 5

    def test_zero_denominator(self) -> None:
        with pytest.raises(ZeroDivisionError):
            mul_div_up(1, 1, 0)


class TestUsdConversion:
    def test_to_usd(self) -> None:
        # 200 units at $3.50
        assert to_usd(200, 35_000_000) == 700

    def test_from_usd(self) -> None:
        assert from_usd(700, 35_000_000) == 200

    @pytest.mark.parametrize("price", [PRICE_SCALE, 12_345_678, 987_654_321_000])
    @pytest.mark.parametrize("amount", [1, 987_654, 10**15 + 7])
    def test_round_trip_within_one_unit(self, price: int, amount: int) -> None:
        back = from_usd(to_usd(amount, price), price)
        assert amount - 1 <= back <= amount


class TestFormatScaled:
    def test_basic(self) -> None:
        assert format_scaled(15_000_000) == "1.5000"

    def test_negative(self) -> None:
        assert format_scaled(-5_000_000) == "-0.5000"

    def test_places(self) -> None:
        assert format_scaled(12_345_678, PRICE_SCALE, 2) == "1.23"
