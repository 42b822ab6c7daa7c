"""
Configuration management infrastructure.

This module provides configuration models and loading from YAML/JSON files
and environment variables.
"""

from .models import ApplicationConfig, LoggingConfig, TransportConfig, UploadConfig
from .loader import ConfigLoader

__all__ = [
    "ApplicationConfig",
    "UploadConfig",
    "TransportConfig",
    "LoggingConfig",
    "ConfigLoader",
]
