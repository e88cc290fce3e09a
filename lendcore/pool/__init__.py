"""Pool ledger and account storage."""
from .accounts import AccountBook
from .ledger import LendingPool

__all__ = ["AccountBook", "LendingPool"]
