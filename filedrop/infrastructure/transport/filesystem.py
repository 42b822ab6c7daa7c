"""
Local directory transport.

Copies payloads into a target directory chunk by chunk with aiofiles,
reporting progress after every chunk and checking the cancellation signal
in between. Every upload gets a file of its own; only that file is removed
when the upload is aborted or fails.
"""

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote, urlparse

import aiofiles
import aiofiles.os

from ...core.domain.uploads import CancelHandle
from ...core.exceptions import TransportError, UploadAbortedError
from ...core.interfaces.lifecycle import IComponent
from ...core.interfaces.upload import ITransport, ProgressCallback

logger = logging.getLogger(__name__)


def destination_directory(destination: str) -> Path:
    """Resolve a ``file://`` URL or plain path to a directory."""
    parsed = urlparse(destination)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(destination)


class FileSystemTransport(ITransport, IComponent):
    """Stores uploaded payloads in a local directory."""

    def __init__(self, chunk_size: int = 64 * 1024):
        self._chunk_size = chunk_size

    @property
    def name(self) -> str:
        return "FileSystemTransport"

    @property
    def version(self) -> str:
        return "1.0.0"

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def check_health(self) -> Dict[str, Any]:
        return {
            "healthy": True,
            "status": "running",
            "details": {"chunk_size": self._chunk_size}
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

        directory = destination_directory(destination)
        hasher = hashlib.sha256()
        total = len(payload)
        target: Optional[Path] = None

        try:
            await aiofiles.os.makedirs(directory, exist_ok=True)
            target, f = await self._create_target(directory, filename)
            try:
                for offset in range(0, total, self._chunk_size):
                    signal.raise_if_aborted()
                    chunk = payload[offset:offset + self._chunk_size]
                    await f.write(chunk)
                    hasher.update(chunk)
                    on_progress((offset + len(chunk)) / total * 100)
                    await asyncio.sleep(0)
            finally:
                await f.close()
            signal.raise_if_aborted()
        except (UploadAbortedError, asyncio.CancelledError):
            await self._discard(target)
            raise
        except OSError as e:
            await self._discard(target)
            raise TransportError(f"Failed to write {target or directory}: {e}")

        logger.debug(f"Stored {target} ({total} bytes)")
        return {"path": str(target), "size": total, "sha256": hasher.hexdigest()}

    async def _create_target(self, directory: Path,
                             filename: Optional[str]) -> Tuple[Path, Any]:
        """
        Create a file that belongs to this upload alone.

        The file is opened in exclusive mode; when the name is taken the
        stem gets a counter, ``notes.txt`` becoming ``notes (1).txt``.
        """
        # Only the base name is used so a candidate cannot escape the directory
        name = Path(filename or "upload").name or "upload"
        stem, suffix = Path(name).stem, Path(name).suffix

        attempt = 0
        while True:
            target = directory / (name if attempt == 0 else f"{stem} ({attempt}){suffix}")
            try:
                return target, await aiofiles.open(target, "xb")
            except FileExistsError:
                attempt += 1

    async def _discard(self, target: Optional[Path]) -> None:
        if target is None:
            return
        try:
            if await aiofiles.os.path.exists(target):
                await aiofiles.os.remove(target)
        except OSError as e:
            logger.warning(f"Failed to remove partial file {target}: {e}")
