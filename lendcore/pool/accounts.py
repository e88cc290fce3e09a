"""Account storage with zero-default reads and pruning of empty records."""
from __future__ import annotations

from collections.abc import Iterator

from ..models import Account

_EMPTY = Account()


class AccountBook:
    """Mapping of account identity to ``Account``.

    Reading an unknown identity yields an all-zero record; writing an
    all-zero record removes the key.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}

    def get(self, account: str) -> Account:
        return self._accounts.get(account, _EMPTY)

    def put(self, account: str, record: Account) -> None:
        if record.is_empty:
            self._accounts.pop(account, None)
        else:
            self._accounts[account] = record

    def __contains__(self, account: object) -> bool:
        return account in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._accounts))

    def items(self) -> list[tuple[str, Account]]:
        return list(self._accounts.items())
