"""
HTTP transport built on aiohttp.

The payload is sent as a multipart form upload and streamed in chunks so
progress can be reported while the request body is being written.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from ...core.domain.uploads import CancelHandle
from ...core.exceptions import TransportError, UploadAbortedError
from ...core.interfaces.lifecycle import IComponent
from ...core.interfaces.upload import ITransport, ProgressCallback

logger = logging.getLogger(__name__)


class HttpTransport(ITransport, IComponent):
    """Uploads payloads with multipart POST requests."""

    def __init__(
        self,
        timeout: float = 300.0,
        chunk_size: int = 64 * 1024,
        field_name: str = "file",
        headers: Optional[Dict[str, str]] = None
    ):
        self._timeout = timeout
        self._chunk_size = chunk_size
        self._field_name = field_name
        self._headers = dict(headers or {})
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def name(self) -> str:
        return "HttpTransport"

    @property
    def version(self) -> str:
        return "1.0.0"

    async def start(self) -> None:
        self._open_session()

    async def stop(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def check_health(self) -> Dict[str, Any]:
        open_session = self._session is not None and not self._session.closed
        return {
            "healthy": True,
            "status": "running" if open_session else "idle",
            "details": {"timeout": self._timeout, "chunk_size": self._chunk_size}
        }

    async def upload(
        self,
        payload: bytes,
        destination: str,
        on_progress: ProgressCallback,
        signal: CancelHandle,
        filename: Optional[str] = None,
        mime_type: Optional[str] = None
    ) -> Any:
        signal.raise_if_aborted()
        session = self._open_session()

        request = asyncio.ensure_future(
            self._post(session, payload, destination, on_progress, signal, filename, mime_type)
        )
        aborted = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait({request, aborted}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            aborted.cancel()

        if not request.done():
            request.cancel()
            await asyncio.wait({request})

        if request.cancelled() or (signal.aborted and request.exception() is not None):
            logger.debug(f"Aborted upload of {filename} to {destination}")
            raise UploadAbortedError()
        return request.result()

    def _open_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=self._headers
            )
        return self._session

    async def _post(
        self,
        session: aiohttp.ClientSession,
        payload: bytes,
        destination: str,
        on_progress: ProgressCallback,
        signal: CancelHandle,
        filename: Optional[str],
        mime_type: Optional[str]
    ) -> Any:
        with aiohttp.MultipartWriter("form-data") as writer:
            part = writer.append(
                self._stream(payload, on_progress, signal),
                {"Content-Type": mime_type or "application/octet-stream"}
            )
            part.set_content_disposition(
                "form-data", name=self._field_name, filename=filename or "upload"
            )

        try:
            async with session.post(destination, data=writer) as response:
                if not 200 <= response.status < 300:
                    body = await response.text()
                    raise TransportError(
                        f"Upload failed with HTTP {response.status}: {body or response.reason}",
                        status=response.status
                    )
                if response.content_type == "application/json":
                    return await response.json()
                return await response.text()
        except aiohttp.ClientError as e:
            raise TransportError(f"Upload request failed: {e}")
        except asyncio.TimeoutError:
            raise TransportError(f"Upload timed out after {self._timeout} seconds")

    async def _stream(self, payload: bytes, on_progress: ProgressCallback,
                      signal: CancelHandle) -> AsyncIterator[bytes]:
        total = len(payload)
        if total == 0:
            return
        for offset in range(0, total, self._chunk_size):
            signal.raise_if_aborted()
            chunk = payload[offset:offset + self._chunk_size]
            yield chunk
            on_progress((offset + len(chunk)) / total * 100)
