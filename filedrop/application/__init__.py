"""
Application layer wiring the core services to the infrastructure.
"""

from .startup import ApplicationStartup

__all__ = [
    "ApplicationStartup",
]
