"""Protocol interfaces for the collaborators the lending core depends on."""
from .clock import Clock
from .event_sink import EventSink
from .price_feed import PriceFeed
from .token import TokenTransfer

__all__ = ["Clock", "EventSink", "PriceFeed", "TokenTransfer"]
