"""Structural event stream for bracket notation conversion.

Key Components:
    XMLEventReader: Lazy, chunked reader producing structural events
    XMLEvent: A single Start / Text / End / EndOfStream event
    EventType: Enumeration of the event kinds
    EventPosition: Line, column and byte offset of an event
"""

from .events import (
    EventPosition,
    EventType,
    XMLEvent,
    XMLEventReader,
)

__all__ = [
    "EventPosition",
    "EventType",
    "XMLEvent",
    "XMLEventReader",
]
