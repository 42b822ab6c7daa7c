"""Shared utility functions."""

from .formatting import format_size

__all__ = [
    "format_size",
]
