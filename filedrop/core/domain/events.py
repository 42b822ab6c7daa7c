"""
Event domain models for upload lifecycle notifications.

The upload manager tells observers about finished uploads by publishing
``Event`` objects on the event bus. ``UploadEvents`` lists the only two
names it ever uses.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional


class EventPriority(IntEnum):
    """Delivery order on the bus; higher values are delivered first."""
    LOW = 1
    NORMAL = 2
    HIGH = 3
    CRITICAL = 4


@dataclass(frozen=True)
class Event:
    """
    One notification queued on the event bus.

    ``data`` for upload events is a dict holding the ``record`` (read-only
    for observers) and either the transport ``response`` or the ``error``.
    ``source`` names the component that published the event.
    """

    name: str
    data: Any = None
    priority: EventPriority = EventPriority.NORMAL
    timestamp: float = field(default_factory=time.time)
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    source: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Event name cannot be empty")
        if not isinstance(self.priority, EventPriority):
            raise ValueError("Priority must be an EventPriority enum value")

    def __lt__(self, other: 'Event') -> bool:
        """Queue ordering: higher priority first, FIFO within a priority."""
        if not isinstance(other, Event):
            return NotImplemented
        if self.priority != other.priority:
            return self.priority > other.priority
        return self.timestamp < other.timestamp


class UploadEvents:
    """Names of the events emitted by the upload manager."""

    COMPLETE = "upload-complete"
    ERROR = "upload-error"
