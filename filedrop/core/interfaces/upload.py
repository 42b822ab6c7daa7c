"""
Upload service interfaces.

This module defines the contracts for the transport that performs a single
upload and for the manager that tracks every submitted file.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Sequence

from .lifecycle import IStartable, IStoppable, IHealthCheckable
from ..domain.uploads import CancelHandle, RawFile, UploadRecord, UploadStatus

ProgressCallback = Callable[[float], None]


class ITransport(ABC):
    """
    Interface for the component that moves one payload to its destination.

    Implementations report progress as a percentage through ``on_progress``
    and must stop with ``UploadAbortedError`` in bounded time once ``signal``
    is aborted. Any other exception is treated as a failure of the upload.
    """

    @abstractmethod
    async def upload(
        self,
        payload: bytes,
        destination: str,
        on_progress: ProgressCallback,
        signal: CancelHandle,
        filename: Optional[str] = None,
        mime_type: Optional[str] = None
    ) -> Any:
        """
        Upload a payload.

        Args:
            payload: File content
            destination: Endpoint URL or target location
            on_progress: Called with the completed percentage (0-100)
            signal: Cancellation token for this upload
            filename: Name to present to the destination (optional)
            mime_type: Content type of the payload (optional)

        Returns:
            The server response

        Raises:
            UploadAbortedError: If the signal was aborted
            TransportError: If the upload failed
        """
        pass


class IUploadManager(IStartable, IStoppable, IHealthCheckable):
    """
    Interface for the upload manager.

    Owns every upload record, validates candidates, launches one transport
    operation per accepted file and mediates cancellation.
    """

    @abstractmethod
    def submit(self, candidates: Sequence[RawFile]) -> List[UploadRecord]:
        """
        Validate candidates and launch uploads for the accepted ones.

        Returns records in input order without waiting on network I/O.
        """
        pass

    @abstractmethod
    def cancel(self, upload_id: str) -> bool:
        """Request abort of a running upload."""
        pass

    @abstractmethod
    def on_progress(self, upload_id: str, percent: float) -> None:
        """Transport callback: progress update."""
        pass

    @abstractmethod
    def on_complete(self, upload_id: str, response: Any) -> None:
        """Transport callback: upload succeeded."""
        pass

    @abstractmethod
    def on_failure(self, upload_id: str, error: BaseException) -> None:
        """Transport callback: upload failed or was aborted."""
        pass

    @abstractmethod
    def get(self, upload_id: str) -> Optional[UploadRecord]:
        """Get a record by ID."""
        pass

    @abstractmethod
    def list_records(self, status: Optional[UploadStatus] = None) -> List[UploadRecord]:
        """List records in submission order with optional filtering."""
        pass

    @abstractmethod
    def remove(self, upload_id: str) -> bool:
        """Remove a finished record from the collection."""
        pass
