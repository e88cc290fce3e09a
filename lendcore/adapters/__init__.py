"""Reference collaborators: in-memory tokens, clocks and event sinks."""
from .clock import ManualClock, SystemClock
from .events import LoggingEventSink, RecordingEventSink, publish
from .tokens import InMemoryToken

__all__ = [
    "InMemoryToken",
    "LoggingEventSink",
    "ManualClock",
    "RecordingEventSink",
    "SystemClock",
    "publish",
]
