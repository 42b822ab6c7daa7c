"""
Upload domain models.

This module defines the candidate file handed to the system, the upload
policy, the result of validating a candidate against that policy, the
cancellation handle given to transports and the upload record that tracks
one file's lifecycle.
"""

import asyncio
import mimetypes
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..exceptions import ErrorKind, UploadAbortedError
from ...utils.formatting import format_size


class UploadStatus(Enum):
    """Upload status enumeration."""
    PENDING = "pending"
    REJECTED = "rejected"
    UPLOADING = "uploading"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Terminal states never transition further."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    UploadStatus.REJECTED,
    UploadStatus.COMPLETE,
    UploadStatus.CANCELLED,
    UploadStatus.FAILED,
})


@dataclass(frozen=True)
class RawFile:
    """A candidate file as produced by a file picker or drop zone."""

    name: str
    size: int
    mime_type: str
    content: bytes = b""

    @classmethod
    def from_path(cls, path: Union[str, Path], mime_type: Optional[str] = None) -> 'RawFile':
        """
        Build a candidate from a file on disk.

        Args:
            path: File to read
            mime_type: Declared MIME type; guessed from the name when omitted

        Returns:
            RawFile holding the file's content
        """
        path = Path(path)
        if mime_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            mime_type = guessed or "application/octet-stream"
        content = path.read_bytes()
        return cls(name=path.name, size=len(content), mime_type=mime_type, content=content)


@dataclass(frozen=True)
class UploadPolicy:
    """Acceptance rules applied to every candidate file."""

    max_size_bytes: int
    allowed_type_patterns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of screening one candidate against an upload policy."""

    accepted: bool
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(accepted=True)

    @classmethod
    def reject(cls, kind: ErrorKind, message: str) -> 'ValidationResult':
        return cls(accepted=False, error_kind=kind, message=message)


class CancelHandle:
    """
    Cancellation token handed to a transport for one upload.

    The manager keeps the handle on the record while the upload is running
    and calls ``abort``; the transport watches ``aborted`` or awaits ``wait``
    and stops with ``UploadAbortedError``.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    def abort(self) -> bool:
        """Request abort. Returns False if abort was already requested."""
        if self._event.is_set():
            return False
        self._event.set()
        return True

    async def wait(self) -> None:
        """Block until abort is requested."""
        await self._event.wait()

    def raise_if_aborted(self) -> None:
        if self._event.is_set():
            raise UploadAbortedError()


@dataclass
class UploadRecord:
    """
    One submitted file's validation and upload lifecycle.

    Records are owned by the upload manager. Observers receive them by
    reference and must treat every field as read-only.
    """

    name: str
    size: int
    mime_type: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: UploadStatus = UploadStatus.PENDING
    progress_percent: float = 0.0
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    payload: Optional[bytes] = field(default=None, repr=False)
    cancel_handle: Optional[CancelHandle] = field(default=None, repr=False)
    response: Any = None
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)
    completed_at: Optional[float] = None

    @classmethod
    def from_candidate(cls, candidate: RawFile) -> 'UploadRecord':
        return cls(
            name=candidate.name,
            size=candidate.size,
            mime_type=candidate.mime_type,
            payload=candidate.content
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for rendering or JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "size_formatted": format_size(self.size),
            "mime_type": self.mime_type,
            "status": self.status.value,
            "progress_percent": round(self.progress_percent, 1),
            "error_message": self.error_message,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "completed_at": self.completed_at,
        }
