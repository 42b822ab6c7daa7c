"""
Upload Manager implementation.

This module owns every upload record, screens candidates with the validator,
launches one transport operation per accepted file and mediates cancellation.

All methods run on the event loop thread. Transport callbacks
(``on_progress``, ``on_complete``, ``on_failure``) never await, so they are
strictly sequenced with ``submit`` and ``cancel``. Each callback first checks
that the record is still uploading and does nothing otherwise; a record that
has reached a terminal state is never touched again.
"""

import asyncio
import logging
import math
import time
from typing import Any, Dict, List, Optional, Sequence

from ..domain.events import Event, UploadEvents
from ..domain.uploads import (
    CancelHandle, RawFile, UploadPolicy, UploadRecord, UploadStatus, ValidationResult
)
from ..exceptions import ErrorKind, UploadAbortedError, is_abort
from ..interfaces.lifecycle import IComponent
from ..interfaces.messaging import IEventBus
from ..interfaces.upload import ITransport, IUploadManager
from .validator import validate

logger = logging.getLogger(__name__)

# Progress stays below 100 until the transport reports success.
MAX_IN_FLIGHT_PROGRESS = 99.9


class UploadManager(IUploadManager, IComponent):
    """
    Upload manager service implementation.

    Records are kept in a dict keyed by upload ID, in submission order. The
    cancel handle of a running upload lives on its record and is dropped the
    moment the record leaves ``UPLOADING``.
    """

    def __init__(
        self,
        transport: ITransport,
        upload_url: str,
        max_file_size: int,
        allowed_types: Sequence[str] = (),
        event_bus: Optional[IEventBus] = None,
        max_concurrent_uploads: int = 0
    ):
        """
        Initialize upload manager.

        Args:
            transport: Performs the actual uploads
            upload_url: Destination handed to the transport for every file
            max_file_size: Largest accepted file in bytes
            allowed_types: Extension (".txt") or MIME glob ("image/*") patterns;
                empty accepts every type
            event_bus: Receives upload-complete and upload-error events
            max_concurrent_uploads: Limit on simultaneous transport calls,
                0 for no limit
        """
        self._transport = transport
        self._upload_url = upload_url
        self._policy = UploadPolicy(
            max_size_bytes=max_file_size,
            allowed_type_patterns=tuple(allowed_types)
        )
        self._event_bus = event_bus
        self._max_concurrent_uploads = max_concurrent_uploads
        self._semaphore: Optional[asyncio.Semaphore] = None

        self._records: Dict[str, UploadRecord] = {}
        self._tasks: Dict[str, asyncio.Task[None]] = {}
        self._running = False

        self._stats = {
            "total_submitted": 0,
            "rejected_uploads": 0,
            "completed_uploads": 0,
            "failed_uploads": 0,
            "cancelled_uploads": 0,
            "total_bytes_uploaded": 0
        }

    @property
    def name(self) -> str:
        return "UploadManager"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def policy(self) -> UploadPolicy:
        return self._policy

    @property
    def upload_url(self) -> str:
        return self._upload_url

    async def start(self) -> None:
        """Start the upload manager service."""
        if self._running:
            return
        self._running = True
        logger.info(f"Upload manager started (destination: {self._upload_url})")

    async def stop(self) -> None:
        """Cancel every active upload and wait for them to settle."""
        if not self._running:
            return

        for record in self.list_records(UploadStatus.UPLOADING):
            self.cancel(record.id)
        await self.wait_idle()

        self._running = False
        logger.info("Upload manager stopped")

    async def check_health(self) -> Dict[str, Any]:
        return {
            "healthy": self._running,
            "status": "running" if self._running else "stopped",
            "details": {
                "uploads_total": len(self._records),
                "uploads_active": len(self._tasks),
                "max_concurrent": self._max_concurrent_uploads,
                "statistics": dict(self._stats)
            }
        }

    def submit(self, candidates: Sequence[RawFile]) -> List[UploadRecord]:
        """
        Validate candidates and launch uploads for the accepted ones.

        Each candidate is handled independently. Rejected candidates produce
        a record in ``REJECTED`` state; accepted ones go from ``PENDING`` to
        ``UPLOADING`` immediately and their upload runs as a background task.
        Must be called from a running event loop.

        Args:
            candidates: Files to upload

        Returns:
            One record per candidate, in input order

        Raises:
            RuntimeError: If no event loop is running; nothing is recorded
        """
        asyncio.get_running_loop()

        records = []
        for candidate in candidates:
            record = UploadRecord.from_candidate(candidate)
            self._records[record.id] = record
            self._stats["total_submitted"] += 1

            result = validate(candidate, self._policy)
            if result.accepted:
                self._launch(record)
            else:
                self._reject(record, result)
            records.append(record)

        return records

    def cancel(self, upload_id: str) -> bool:
        """
        Request abort of a running upload.

        The record becomes ``CANCELLED`` only when the transport confirms the
        abort through ``on_failure``.

        Returns:
            True if an abort was requested, False for unknown IDs, records
            that are not uploading, or a repeated request
        """
        record = self._records.get(upload_id)
        if record is None:
            logger.warning(f"Upload not found: {upload_id}")
            return False

        if record.status != UploadStatus.UPLOADING or record.cancel_handle is None:
            return False

        if not record.cancel_handle.abort():
            return False

        logger.info(f"Cancellation requested for upload {upload_id} ({record.name})")
        return True

    def on_progress(self, upload_id: str, percent: float) -> None:
        """Record transport progress; progress never moves backwards."""
        record = self._active_record(upload_id, "progress")
        if record is None:
            return

        try:
            value = float(percent)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid progress value for {upload_id}: {percent!r}")
            return
        if math.isnan(value):
            return

        value = min(max(value, 0.0), MAX_IN_FLIGHT_PROGRESS)
        if value > record.progress_percent:
            record.progress_percent = value
            record.updated_at = time.time()

    def on_complete(self, upload_id: str, response: Any) -> None:
        """Mark an upload complete and emit ``upload-complete``."""
        record = self._active_record(upload_id, "completion")
        if record is None:
            return

        self._finish(record, UploadStatus.COMPLETE)
        record.progress_percent = 100.0
        record.response = response
        record.completed_at = record.updated_at
        self._stats["completed_uploads"] += 1
        self._stats["total_bytes_uploaded"] += record.size

        logger.info(f"Upload completed: {upload_id} ({record.name})")
        self._emit(UploadEvents.COMPLETE, {"record": record, "response": response})

    def on_failure(self, upload_id: str, error: BaseException) -> None:
        """
        Settle a failed upload.

        Aborts become ``CANCELLED`` silently; any other error becomes
        ``FAILED`` and is reported with ``upload-error``.
        """
        record = self._active_record(upload_id, "failure")
        if record is None:
            return

        if is_abort(error):
            self._finish(record, UploadStatus.CANCELLED)
            self._stats["cancelled_uploads"] += 1
            logger.info(f"Upload cancelled: {upload_id} ({record.name})")
            return

        self._finish(record, UploadStatus.FAILED)
        record.error_message = describe_error(error)
        record.error_kind = ErrorKind.OTHER_FAILURE
        self._stats["failed_uploads"] += 1

        logger.error(f"Upload failed: {upload_id} ({record.name}): {record.error_message}")
        self._emit(UploadEvents.ERROR, {"record": record, "error": error})

    def get(self, upload_id: str) -> Optional[UploadRecord]:
        return self._records.get(upload_id)

    def list_records(self, status: Optional[UploadStatus] = None) -> List[UploadRecord]:
        """List records in submission order with optional status filtering."""
        return [
            record for record in self._records.values()
            if status is None or record.status == status
        ]

    def remove(self, upload_id: str) -> bool:
        """Remove a record that has reached a terminal state."""
        record = self._records.get(upload_id)
        if record is None or not record.is_terminal:
            return False
        del self._records[upload_id]
        return True

    def clear_finished(self) -> int:
        """Remove every terminal record and return how many were removed."""
        finished = [r.id for r in self._records.values() if r.is_terminal]
        for upload_id in finished:
            del self._records[upload_id]
        if finished:
            logger.info(f"Cleared {len(finished)} finished uploads")
        return len(finished)

    async def wait_idle(self) -> None:
        """Wait until no upload task is running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    def get_statistics(self) -> Dict[str, Any]:
        """Get upload statistics and per-status counts."""
        by_status = {status.value: 0 for status in UploadStatus}
        for record in self._records.values():
            by_status[record.status.value] += 1
        return {
            **self._stats,
            "active_uploads": len(self._tasks),
            "records_by_status": by_status
        }

    def _reject(self, record: UploadRecord, result: ValidationResult) -> None:
        record.status = UploadStatus.REJECTED
        record.error_kind = result.error_kind
        record.error_message = result.message
        record.payload = None
        record.updated_at = time.time()
        self._stats["rejected_uploads"] += 1
        logger.warning(f"Rejected {record.name}: {result.message}")

    def _launch(self, record: UploadRecord) -> None:
        handle = CancelHandle()
        task = asyncio.create_task(self._run_upload(record, record.payload or b"", handle))
        record.cancel_handle = handle
        record.status = UploadStatus.UPLOADING
        record.updated_at = time.time()

        self._tasks[record.id] = task
        task.add_done_callback(lambda _: self._tasks.pop(record.id, None))

        logger.info(f"Started upload {record.id} ({record.name}, {record.size} bytes)")

    async def _run_upload(self, record: UploadRecord, payload: bytes,
                          handle: CancelHandle) -> None:
        """Drive one transport call and route its outcome to the callbacks."""
        upload_id = record.id
        try:
            acquired = await self._acquire_slot(handle)
            try:
                handle.raise_if_aborted()
                if record.status != UploadStatus.UPLOADING:
                    # Settled by a callback before the transport was called
                    return
                response = await self._transport.upload(
                    payload,
                    self._upload_url,
                    on_progress=lambda percent: self.on_progress(upload_id, percent),
                    signal=handle,
                    filename=record.name,
                    mime_type=record.mime_type
                )
            finally:
                if acquired and self._semaphore is not None:
                    self._semaphore.release()
        except asyncio.CancelledError:
            self.on_failure(upload_id, UploadAbortedError("Upload task cancelled"))
            raise
        except Exception as e:
            self.on_failure(upload_id, e)
        else:
            self.on_complete(upload_id, response)

    async def _acquire_slot(self, handle: CancelHandle) -> bool:
        """Wait for a concurrency slot, giving up if the upload is aborted."""
        if self._max_concurrent_uploads <= 0:
            return False
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max_concurrent_uploads)

        acquire = asyncio.ensure_future(self._semaphore.acquire())
        aborted = asyncio.ensure_future(handle.wait())
        await asyncio.wait({acquire, aborted}, return_when=asyncio.FIRST_COMPLETED)
        aborted.cancel()

        if not acquire.done():
            acquire.cancel()
            await asyncio.wait({acquire})
        if acquire.cancelled():
            raise UploadAbortedError()
        return True

    def _active_record(self, upload_id: str, what: str) -> Optional[UploadRecord]:
        record = self._records.get(upload_id)
        if record is None or record.status != UploadStatus.UPLOADING:
            logger.debug(f"Ignoring late {what} callback for upload {upload_id}")
            return None
        return record

    def _finish(self, record: UploadRecord, status: UploadStatus) -> None:
        record.status = status
        record.cancel_handle = None
        record.payload = None
        record.updated_at = time.time()

    def _emit(self, event_name: str, data: Dict[str, Any]) -> None:
        if self._event_bus is None:
            return
        try:
            self._event_bus.publish_nowait(Event(name=event_name, data=data, source=self.name))
        except RuntimeError as e:
            logger.error(f"Could not publish {event_name}: {e}")


def describe_error(error: BaseException) -> str:
    """Turn a transport error into a message suitable for display."""
    message = getattr(error, 'message', None) or str(error)
    return message or error.__class__.__name__
