"""
Transport implementations.

A transport performs one upload, reports progress and honours the
cancellation signal given to it by the upload manager.
"""

from typing import Dict, Optional
from urllib.parse import urlparse

from ...core.exceptions import ConfigurationError
from ...core.interfaces.upload import ITransport
from .filesystem import FileSystemTransport
from .http import HttpTransport


def create_transport(upload_url: str, timeout: float = 300.0, chunk_size: int = 64 * 1024,
                     field_name: str = "file",
                     headers: Optional[Dict[str, str]] = None) -> ITransport:
    """Pick a transport from the scheme of the upload URL."""
    scheme = urlparse(upload_url).scheme.lower()
    if scheme in ("http", "https"):
        return HttpTransport(
            timeout=timeout, chunk_size=chunk_size, field_name=field_name, headers=headers
        )
    if scheme in ("", "file"):
        return FileSystemTransport(chunk_size=chunk_size)
    raise ConfigurationError(f"Unsupported upload URL scheme: {scheme}")


__all__ = [
    "HttpTransport",
    "FileSystemTransport",
    "create_transport",
]
