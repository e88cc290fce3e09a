"""Token transfer protocol — moves one asset between an account and the pool."""
from typing import Protocol


class TokenTransfer(Protocol):
    """Either fully succeeds or raises; partial transfers are never observed."""

    @property
    def symbol(self) -> str: ...

    def transfer_in(self, from_account: str, amount: int) -> None: ...

    def transfer_out(self, to_account: str, amount: int) -> None: ...
