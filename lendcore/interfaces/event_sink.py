"""Event sink protocol — best-effort ledger notifications."""
from typing import Protocol

from ..models import LedgerEvent


class EventSink(Protocol):
    """Receives events after an operation has committed."""

    def emit(self, event: LedgerEvent) -> None: ...
