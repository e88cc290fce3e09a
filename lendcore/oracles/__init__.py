"""Price sources: the admin-fed ledger oracle and the off-chain Pyth feed."""
from .ledger_oracle import PriceOracle
from .pyth import PythPriceFeed

__all__ = ["PriceOracle", "PythPriceFeed"]
