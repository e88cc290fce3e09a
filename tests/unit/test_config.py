"""Unit tests for config loading, env interpolation, and validation."""
from __future__ import annotations

from pathlib import Path

import pytest

from lendcore.config import (
    AppConfig,
    KeeperConfig,
    OracleConfig,
    PoolConfig,
    _interpolate_env,
    load_config,
)
from lendcore.errors import InvalidInput
from lendcore.models import RateCurveParameters, RiskParameters

_VALID_BASE = """\
pool:
  admin: "${TEST_POOL_ADMIN}"
  collateral_asset: XLM
  borrow_asset: USDC
oracle:
  admin: oracle-admin
"""


def _write(tmp_path: Path, content: str) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(content)
    return cfg_file


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _interpolate_env("${MY_VAR}") == "hello"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOK", "secret")
        result = _interpolate_env({"key": "${TOK}", "plain": "text"})
        assert result == {"key": "secret", "plain": "text"}

    def test_nested_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("A", "x")
        assert _interpolate_env(["${A}", "y"]) == ["x", "y"]

    def test_non_string_passthrough(self) -> None:
        assert _interpolate_env(42) == 42
        assert _interpolate_env(True) is True


class TestLoadConfig:
    def test_loads_valid_yaml(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert isinstance(cfg, AppConfig)
        assert cfg.pool.admin == "pool-admin"
        assert cfg.pool.collateral_asset == "XLM"
        assert cfg.pool.risk == RiskParameters(7000, 8500, 500)
        assert cfg.rate_curve.base_rate == 100_000
        assert cfg.oracle.staleness_threshold == 600
        assert cfg.oracle.stable_assets == ("USDC",)
        assert cfg.keeper.interval_seconds == 120
        assert cfg.keeper.pyth.feeds == {"XLM": "aaa"}

    def test_defaults_fill_missing_sections(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_POOL_ADMIN", "admin-x")
        cfg = load_config(_write(tmp_path, _VALID_BASE))
        assert cfg.pool.risk == RiskParameters()
        assert cfg.rate_curve == RateCurveParameters()
        assert cfg.oracle.staleness_threshold == 3600
        assert cfg.keeper.enabled is False

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_env_interpolation_in_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_POOL_ADMIN", "GADMIN123")
        cfg = load_config(_write(tmp_path, _VALID_BASE))
        assert cfg.pool.admin == "GADMIN123"


class TestValidation:
    def test_missing_pool_admin_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("TEST_POOL_ADMIN", raising=False)
        with pytest.raises(ValueError, match="Pool admin must be configured"):
            load_config(_write(tmp_path, _VALID_BASE))

    def test_missing_oracle_admin_raises(self, tmp_path: Path) -> None:
        content = "pool:\n  admin: a\n"
        with pytest.raises(ValueError, match="Oracle admin must be configured"):
            load_config(_write(tmp_path, content))

    def test_same_assets_raise(self, tmp_path: Path) -> None:
        content = """\
pool:
  admin: a
  collateral_asset: usdc
  borrow_asset: USDC
oracle:
  admin: o
"""
        with pytest.raises(ValueError, match="must differ"):
            load_config(_write(tmp_path, content))

    def test_ltv_above_threshold_raises(self, tmp_path: Path) -> None:
        content = """\
pool:
  admin: a
  risk: {ltv_ratio: 9000, liquidation_threshold: 8000}
oracle:
  admin: o
"""
        with pytest.raises(ValueError, match="Invalid risk parameters"):
            load_config(_write(tmp_path, content))

    def test_bad_optimal_utilization_raises(self, tmp_path: Path) -> None:
        content = """\
pool:
  admin: a
rate_curve:
  optimal_utilization: 10000000
oracle:
  admin: o
"""
        with pytest.raises(InvalidInput, match="optimal_utilization"):
            load_config(_write(tmp_path, content))

    def test_negative_staleness_raises(self, tmp_path: Path) -> None:
        content = "pool:\n  admin: a\noracle:\n  admin: o\n  staleness_threshold: -1\n"
        with pytest.raises(ValueError, match="staleness_threshold"):
            load_config(_write(tmp_path, content))

    def test_zero_keeper_interval_raises(self, tmp_path: Path) -> None:
        content = (
            "pool:\n  admin: a\noracle:\n  admin: o\n"
            "keeper:\n  interval_seconds: 0\n"
        )
        with pytest.raises(ValueError, match="interval_seconds must be positive"):
            load_config(_write(tmp_path, content))


class TestFrozenConfigs:
    def test_pool_config_immutable(self) -> None:
        p = PoolConfig(admin="a")
        with pytest.raises(AttributeError):
            p.admin = "b"  # type: ignore[misc]

    def test_oracle_config_immutable(self) -> None:
        o = OracleConfig()
        with pytest.raises(AttributeError):
            o.staleness_threshold = 1  # type: ignore[misc]

    def test_keeper_config_immutable(self) -> None:
        k = KeeperConfig()
        with pytest.raises(AttributeError):
            k.enabled = True  # type: ignore[misc]
