"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .fixed_point import DEFAULT_STALENESS_THRESHOLD
from .models import RateCurveParameters, RiskParameters

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PoolConfig:
    admin: str = ""
    collateral_asset: str = "XLM"
    borrow_asset: str = "USDC"
    risk: RiskParameters = field(default_factory=RiskParameters)


@dataclass(frozen=True)
class OracleConfig:
    admin: str = ""
    staleness_threshold: int = DEFAULT_STALENESS_THRESHOLD
    stable_assets: tuple[str, ...] = ("USDC",)


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class KeeperConfig:
    enabled: bool = False
    interval_seconds: int = 300
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    pool: PoolConfig = field(default_factory=PoolConfig)
    rate_curve: RateCurveParameters = field(default_factory=RateCurveParameters)
    oracle: OracleConfig = field(default_factory=OracleConfig)
    keeper: KeeperConfig = field(default_factory=KeeperConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_risk(raw: dict[str, Any]) -> RiskParameters:
    defaults = RiskParameters()
    return RiskParameters(
        ltv_ratio=int(raw.get("ltv_ratio", defaults.ltv_ratio)),
        liquidation_threshold=int(
            raw.get("liquidation_threshold", defaults.liquidation_threshold)
        ),
        liquidation_bonus=int(raw.get("liquidation_bonus", defaults.liquidation_bonus)),
    )


def _build_pool(raw: dict[str, Any]) -> PoolConfig:
    return PoolConfig(
        admin=str(raw.get("admin", "")),
        collateral_asset=str(raw.get("collateral_asset", "XLM")).upper(),
        borrow_asset=str(raw.get("borrow_asset", "USDC")).upper(),
        risk=_build_risk(raw.get("risk", {})),
    )


def _build_rate_curve(raw: dict[str, Any]) -> RateCurveParameters:
    defaults = RateCurveParameters()
    return RateCurveParameters(
        base_rate=int(raw.get("base_rate", defaults.base_rate)),
        slope1=int(raw.get("slope1", defaults.slope1)),
        slope2=int(raw.get("slope2", defaults.slope2)),
        optimal_utilization=int(
            raw.get("optimal_utilization", defaults.optimal_utilization)
        ),
    )


def _build_oracle(raw: dict[str, Any]) -> OracleConfig:
    return OracleConfig(
        admin=str(raw.get("admin", "")),
        staleness_threshold=int(
            raw.get("staleness_threshold", DEFAULT_STALENESS_THRESHOLD)
        ),
        stable_assets=tuple(s.upper() for s in raw.get("stable_assets", ["USDC"])),
    )


def _build_keeper(raw: dict[str, Any]) -> KeeperConfig:
    pyth_raw = raw.get("pyth", {})
    return KeeperConfig(
        enabled=bool(raw.get("enabled", False)),
        interval_seconds=int(raw.get("interval_seconds", 300)),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds={k.upper(): v for k, v in pyth_raw.get("feeds", {}).items()},
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate the lending core configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        pool=_build_pool(raw.get("pool", {})),
        rate_curve=_build_rate_curve(raw.get("rate_curve", {})),
        oracle=_build_oracle(raw.get("oracle", {})),
        keeper=_build_keeper(raw.get("keeper", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.pool.admin:
        raise ValueError("Pool admin must be configured")
    if not cfg.oracle.admin:
        raise ValueError("Oracle admin must be configured")
    if not cfg.pool.collateral_asset or not cfg.pool.borrow_asset:
        raise ValueError("Both collateral_asset and borrow_asset must be set")
    if cfg.pool.collateral_asset == cfg.pool.borrow_asset:
        raise ValueError(
            f"collateral_asset and borrow_asset must differ ('{cfg.pool.borrow_asset}')"
        )
    if cfg.oracle.staleness_threshold < 0:
        raise ValueError("staleness_threshold must not be negative")
    if cfg.keeper.interval_seconds <= 0:
        raise ValueError("Keeper interval_seconds must be positive")

    cfg.pool.risk.validate()
    cfg.rate_curve.validate()
