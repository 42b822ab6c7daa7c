"""
Core service implementations.
"""

from .event_bus import EventBus
from .upload_manager import UploadManager
from .validator import validate, matches_type

__all__ = [
    "EventBus",
    "UploadManager",
    "validate",
    "matches_type",
]
