"""
Domain models for uploads and the events emitted about them.
"""

from .events import Event, EventPriority, UploadEvents
from .uploads import (
    CancelHandle, RawFile, UploadPolicy, UploadRecord, UploadStatus, ValidationResult,
    TERMINAL_STATUSES
)

__all__ = [
    "Event",
    "EventPriority",
    "UploadEvents",
    "CancelHandle",
    "RawFile",
    "UploadPolicy",
    "UploadRecord",
    "UploadStatus",
    "ValidationResult",
    "TERMINAL_STATUSES",
]
