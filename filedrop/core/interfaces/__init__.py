"""
Core interfaces defining the contracts between components.
"""

from .lifecycle import IStartable, IStoppable, IHealthCheckable, IComponent
from .messaging import IEventBus
from .upload import ITransport, IUploadManager, ProgressCallback

__all__ = [
    "IStartable",
    "IStoppable",
    "IHealthCheckable",
    "IComponent",
    "IEventBus",
    "ITransport",
    "IUploadManager",
    "ProgressCallback",
]
