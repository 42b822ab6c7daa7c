"""
Infrastructure layer containing external dependencies and I/O operations.

This layer handles configuration, logging and the transports that move
file content to its destination.
"""

from .config.loader import ConfigLoader
from .config.models import ApplicationConfig
from .logging.setup import LoggingManager
from .transport import FileSystemTransport, HttpTransport, create_transport

__all__ = [
    "ConfigLoader",
    "ApplicationConfig",
    "LoggingManager",
    "FileSystemTransport",
    "HttpTransport",
    "create_transport",
]
