"""Service modules"""
from .keeper import KeeperReport, PriceKeeper, run_keeper

__all__ = ["KeeperReport", "PriceKeeper", "run_keeper"]
