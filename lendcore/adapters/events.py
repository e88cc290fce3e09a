"""Event sinks."""
from __future__ import annotations

import logging

from ..interfaces.event_sink import EventSink
from ..models import LedgerEvent

logger = logging.getLogger(__name__)


class LoggingEventSink:
    """Write each ledger event to the log."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def emit(self, event: LedgerEvent) -> None:
        logger.log(
            self._level,
            "Event %s — account: %s  amount: %d  t=%d %s",
            event.name,
            event.account,
            event.amount,
            event.timestamp,
            event.details or "",
        )


class RecordingEventSink:
    """Keep emitted events in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[LedgerEvent] = []

    def emit(self, event: LedgerEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [e.name for e in self.events]


def publish(sink: EventSink | None, event: LedgerEvent) -> None:
    """Deliver ``event`` to ``sink``; a failing sink is logged, never raised."""
    if sink is None:
        return
    try:
        sink.emit(event)
    except Exception as e:
        logger.error("Event sink failed on '%s': %s", event.name, e)
