"""
Core module containing the upload domain model, service interfaces and the
upload manager, independent of transports and configuration sources.
"""

from .interfaces.lifecycle import IStartable, IStoppable, IHealthCheckable, IComponent
from .interfaces.messaging import IEventBus
from .interfaces.upload import ITransport, IUploadManager
from .domain.events import Event, EventPriority, UploadEvents
from .domain.uploads import (
    CancelHandle, RawFile, UploadPolicy, UploadRecord, UploadStatus, ValidationResult
)

__all__ = [
    "IStartable",
    "IStoppable",
    "IHealthCheckable",
    "IComponent",
    "IEventBus",
    "ITransport",
    "IUploadManager",
    "Event",
    "EventPriority",
    "UploadEvents",
    "CancelHandle",
    "RawFile",
    "UploadPolicy",
    "UploadRecord",
    "UploadStatus",
    "ValidationResult",
]
