"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from lendcore.adapters import InMemoryToken, ManualClock, RecordingEventSink
from lendcore.config import KeeperConfig, PythConfig
from lendcore.fixed_point import PRICE_SCALE
from lendcore.interest import InterestRateModel
from lendcore.models import RiskParameters
from lendcore.oracles import PriceOracle
from lendcore.pool import LendingPool

GENESIS = 1_700_000_000

ORACLE_ADMIN = "oracle-admin"
POOL_ADMIN = "pool-admin"


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(GENESIS)


@pytest.fixture()
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture()
def oracle(clock: ManualClock) -> PriceOracle:
    oracle = PriceOracle(clock)
    oracle.initialize(ORACLE_ADMIN)
    oracle.set_price(ORACLE_ADMIN, "XLM", PRICE_SCALE)
    return oracle


@pytest.fixture()
def refresh_prices(oracle: PriceOracle) -> Callable[..., None]:
    """Re-stamp both pool assets at the current clock reading."""

    def _refresh(xlm: int = PRICE_SCALE, usdc: int = PRICE_SCALE) -> None:
        oracle.set_price(ORACLE_ADMIN, "XLM", xlm)
        oracle.set_price(ORACLE_ADMIN, "USDC", usdc)

    return _refresh


@pytest.fixture()
def rate_model() -> InterestRateModel:
    model = InterestRateModel()
    model.initialize_default()
    return model


@pytest.fixture()
def usdc() -> InMemoryToken:
    return InMemoryToken("USDC", {"alice": 100_000, "bob": 1_000, "carol": 20_000})


@pytest.fixture()
def xlm() -> InMemoryToken:
    return InMemoryToken("XLM", {"bob": 100_000, "dave": 50_000})


@pytest.fixture()
def risk_params() -> RiskParameters:
    return RiskParameters(ltv_ratio=7500, liquidation_threshold=8000, liquidation_bonus=500)


# ---------------------------------------------------------------------------
# Pools
# ---------------------------------------------------------------------------


@pytest.fixture()
def pool(
    oracle: PriceOracle,
    rate_model: InterestRateModel,
    clock: ManualClock,
    usdc: InMemoryToken,
    xlm: InMemoryToken,
    events: RecordingEventSink,
    risk_params: RiskParameters,
) -> LendingPool:
    pool = LendingPool(oracle, rate_model, clock, usdc, xlm, events)
    pool.initialize(POOL_ADMIN, "XLM", "USDC", risk_params)
    return pool


@pytest.fixture()
def borrowed_pool(pool: LendingPool) -> LendingPool:
    """alice supplies 50_000 USDC; bob posts 10_000 XLM ($1) and borrows 7_500 USDC."""
    pool.deposit("alice", "alice", 50_000)
    pool.deposit_collateral("bob", "bob", 10_000)
    pool.borrow("bob", "bob", 7_500)
    return pool


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_pyth_config() -> PythConfig:
    return PythConfig(
        hermes_url="https://hermes.pyth.network/v2/updates/price/latest",
        feeds={"XLM": "aaa111", "BTC": "bbb222", "USDC": "ccc333"},
    )


@pytest.fixture()
def sample_keeper_config(sample_pyth_config: PythConfig) -> KeeperConfig:
    return KeeperConfig(enabled=True, interval_seconds=60, pyth=sample_pyth_config)


SAMPLE_YAML = textwrap.dedent("""\
    pool:
      admin: pool-admin
      collateral_asset: xlm
      borrow_asset: USDC
      risk:
        ltv_ratio: 7000
        liquidation_threshold: 8500
        liquidation_bonus: 500
    rate_curve:
      base_rate: 100000
      slope1: 400000
      slope2: 7500000
      optimal_utilization: 8000000
    oracle:
      admin: oracle-admin
      staleness_threshold: 600
      stable_assets: [usdc]
    keeper:
      enabled: true
      interval_seconds: 120
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {xlm: "aaa"}
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
