"""Clock protocol — host-supplied time source."""
from typing import Protocol


class Clock(Protocol):
    """Monotonic seconds since epoch."""

    def now(self) -> int: ...
