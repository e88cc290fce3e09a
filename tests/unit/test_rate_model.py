"""Unit tests for the kinked interest rate model."""
from __future__ import annotations

import pytest

from lendcore.config import AppConfig
from lendcore.errors import AlreadyInitialized, InvalidInput, NotInitialized
from lendcore.interest import DEFAULT_RATE_CURVE, InterestRateModel, utilization
from lendcore.models import RateCurveParameters


@pytest.fixture()
def model() -> InterestRateModel:
    m = InterestRateModel()
    m.initialize_default()
    return m


class TestUtilization:
    def test_empty_pool(self) -> None:
        assert utilization(0, 0) == 0

    def test_borrows_without_deposits(self) -> None:
        assert utilization(100, 0) == 0

    def test_ratio(self) -> None:
        assert utilization(7_500, 50_000) == 1_500_000


class TestBorrowRate:
    @pytest.mark.parametrize(
        "u, expected",
        [
            (0, 0),
            (4_000_000, 200_000),
            (8_000_000, 400_000),
            (9_000_000, 4_150_000),
            (10_000_000, 7_900_000),
        ],
    )
    def test_default_curve(self, model: InterestRateModel, u: int, expected: int) -> None:
        assert model.get_borrow_rate(u) == expected

    def test_base_rate_added(self) -> None:
        m = InterestRateModel()
        m.initialize(RateCurveParameters(base_rate=100_000))
        assert m.get_borrow_rate(0) == 100_000
        assert m.get_borrow_rate(8_000_000) == 500_000

    def test_negative_utilization(self, model: InterestRateModel) -> None:
        with pytest.raises(InvalidInput):
            model.get_borrow_rate(-1)

    def test_monotonic(self, model: InterestRateModel) -> None:
        rates = [model.get_borrow_rate(u) for u in range(0, 10_000_001, 250_000)]
        assert rates == sorted(rates)


class TestSupplyRate:
    def test_at_kink(self, model: InterestRateModel) -> None:
        assert model.get_supply_rate(8_000_000) == 320_000

    def test_idle_pool_earns_nothing(self, model: InterestRateModel) -> None:
        assert model.get_supply_rate(0) == 0

    def test_never_above_borrow_rate(self, model: InterestRateModel) -> None:
        for u in (1_000_000, 8_000_000, 10_000_000):
            assert model.get_supply_rate(u) <= model.get_borrow_rate(u)


class TestLifecycle:
    def test_uninitialized_raises(self) -> None:
        m = InterestRateModel()
        assert not m.is_initialized
        with pytest.raises(NotInitialized):
            m.get_borrow_rate(0)

    def test_double_initialize(self, model: InterestRateModel) -> None:
        with pytest.raises(AlreadyInitialized):
            model.initialize(DEFAULT_RATE_CURVE)

    def test_invalid_params_leave_model_uninitialized(self) -> None:
        m = InterestRateModel()
        with pytest.raises(InvalidInput):
            m.initialize(RateCurveParameters(optimal_utilization=0))
        assert not m.is_initialized

    def test_parameters(self, model: InterestRateModel) -> None:
        assert model.parameters == DEFAULT_RATE_CURVE

    def test_from_config(self) -> None:
        cfg = AppConfig(rate_curve=RateCurveParameters(slope1=500_000))
        m = InterestRateModel.from_config(cfg)
        assert m.get_borrow_rate(8_000_000) == 500_000
