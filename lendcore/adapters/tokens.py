"""In-memory token ledger implementing ``TokenTransfer``."""
from __future__ import annotations

import logging

from ..errors import InsufficientBalance, InvalidInput

logger = logging.getLogger(__name__)


class InMemoryToken:
    """Wallet balances for one asset plus the pool's vault balance.

    ``transfer_in`` moves funds from a wallet into the vault and
    ``transfer_out`` the reverse. Both check before they move anything.
    """

    def __init__(self, symbol: str, balances: dict[str, int] | None = None) -> None:
        self._symbol = symbol
        self._wallets: dict[str, int] = dict(balances or {})
        self._vault = 0

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def vault_balance(self) -> int:
        return self._vault

    def balance_of(self, account: str) -> int:
        return self._wallets.get(account, 0)

    def mint(self, account: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidInput("Mint amount must be positive")
        self._wallets[account] = self.balance_of(account) + amount

    def transfer_in(self, from_account: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidInput("Transfer amount must be positive")
        balance = self.balance_of(from_account)
        if balance < amount:
            raise InsufficientBalance(
                f"{from_account} holds {balance} {self._symbol}, needs {amount}"
            )
        self._wallets[from_account] = balance - amount
        self._vault += amount
        logger.debug("%s transfer in: %s -> vault %d", self._symbol, from_account, amount)

    def transfer_out(self, to_account: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidInput("Transfer amount must be positive")
        if self._vault < amount:
            raise InsufficientBalance(
                f"Vault holds {self._vault} {self._symbol}, needs {amount}"
            )
        self._vault -= amount
        self._wallets[to_account] = self.balance_of(to_account) + amount
        logger.debug("%s transfer out: vault -> %s %d", self._symbol, to_account, amount)
