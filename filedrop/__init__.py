"""
filedrop - concurrent file uploads with per-file validation, progress and cancellation.

This package tracks every submitted file through its own lifecycle. Uploads
run concurrently on one event loop and can be cancelled individually without
affecting the others.
"""

__version__ = "0.1.0"

# Public API exports
from .core.domain.events import Event, UploadEvents
from .core.domain.uploads import RawFile, UploadPolicy, UploadRecord, UploadStatus
from .core.interfaces.upload import ITransport, IUploadManager
from .core.services.event_bus import EventBus
from .core.services.upload_manager import UploadManager
from .core.services.validator import validate
from .utils.formatting import format_size

__all__ = [
    "Event",
    "UploadEvents",
    "RawFile",
    "UploadPolicy",
    "UploadRecord",
    "UploadStatus",
    "ITransport",
    "IUploadManager",
    "EventBus",
    "UploadManager",
    "validate",
    "format_size",
]
