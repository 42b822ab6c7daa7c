"""
Tests for the aiohttp transport against a local test server.
"""

import asyncio
import pytest
from typing import Any, AsyncGenerator, Dict, List

from aiohttp import web
from aiohttp.test_utils import TestServer

from filedrop.core.domain.uploads import CancelHandle
from filedrop.core.exceptions import TransportError, UploadAbortedError
from filedrop.infrastructure.transport.http import HttpTransport


class UploadServer:
    """Collects the multipart uploads the test server receives."""

    def __init__(self) -> None:
        self.received: List[Dict[str, Any]] = []
        self.release = asyncio.Event()

    async def handle_upload(self, request: web.Request) -> web.Response:
        reader = await request.multipart()
        part = await reader.next()
        content = await part.read()
        self.received.append({
            "field": part.name,
            "filename": part.filename,
            "content_type": part.headers.get("Content-Type"),
            "content": bytes(content),
            "auth": request.headers.get("Authorization"),
        })
        return web.json_response({"stored": part.filename, "size": len(content)})

    async def handle_error(self, request: web.Request) -> web.Response:
        await request.read()
        return web.Response(status=500, text="disk full")

    async def handle_slow(self, request: web.Request) -> web.Response:
        await request.read()
        try:
            await asyncio.wait_for(self.release.wait(), timeout=5)
        except asyncio.TimeoutError:
            pass
        return web.Response(text="late")

    async def handle_text(self, request: web.Request) -> web.Response:
        await request.read()
        return web.Response(text="ok")


class TestHttpTransport:
    """Test cases for HttpTransport."""

    @pytest.fixture
    def upload_server(self) -> UploadServer:
        return UploadServer()

    @pytest.fixture
    async def server(self, upload_server: UploadServer) -> AsyncGenerator[TestServer, None]:
        app = web.Application()
        app.router.add_post("/upload", upload_server.handle_upload)
        app.router.add_post("/error", upload_server.handle_error)
        app.router.add_post("/slow", upload_server.handle_slow)
        app.router.add_post("/text", upload_server.handle_text)
        test_server = TestServer(app)
        await test_server.start_server()
        yield test_server
        upload_server.release.set()
        await test_server.close()

    @pytest.fixture
    async def transport(self) -> AsyncGenerator[HttpTransport, None]:
        transport = HttpTransport(
            timeout=10, chunk_size=1024, headers={"Authorization": "Bearer token"}
        )
        yield transport
        await transport.stop()

    async def test_upload_success(self, server: TestServer, transport: HttpTransport,
                                  upload_server: UploadServer) -> None:
        """Test a multipart upload with a JSON response."""
        progress: List[float] = []
        payload = b"a" * 4096

        response = await transport.upload(
            payload, str(server.make_url("/upload")), progress.append, CancelHandle(),
            filename="notes.txt", mime_type="text/plain"
        )

        assert response == {"stored": "notes.txt", "size": 4096}
        assert progress == [25, 50, 75, 100]

        received = upload_server.received[0]
        assert received["field"] == "file"
        assert received["filename"] == "notes.txt"
        assert received["content_type"] == "text/plain"
        assert received["content"] == payload
        assert received["auth"] == "Bearer token"

    async def test_text_response(self, server: TestServer, transport: HttpTransport) -> None:
        response = await transport.upload(
            b"data", str(server.make_url("/text")), lambda p: None, CancelHandle(),
            filename="a.bin"
        )

        assert response == "ok"

    async def test_server_error(self, server: TestServer, transport: HttpTransport) -> None:
        """Test that non-2xx responses become transport errors."""
        with pytest.raises(TransportError) as exc_info:
            await transport.upload(
                b"data", str(server.make_url("/error")), lambda p: None, CancelHandle(),
                filename="a.bin"
            )

        assert exc_info.value.status == 500
        assert "HTTP 500" in exc_info.value.message
        assert "disk full" in exc_info.value.message

    async def test_connection_error(self, transport: HttpTransport) -> None:
        with pytest.raises(TransportError, match="Upload request failed"):
            await transport.upload(
                b"data", "http://127.0.0.1:1/upload", lambda p: None, CancelHandle(),
                filename="a.bin"
            )

    async def test_abort_in_flight(self, server: TestServer, transport: HttpTransport) -> None:
        """Aborting while waiting for the response raises UploadAbortedError."""
        signal = CancelHandle()
        upload = asyncio.ensure_future(transport.upload(
            b"data", str(server.make_url("/slow")), lambda p: None, signal, filename="a.bin"
        ))
        await asyncio.sleep(0.1)
        assert not upload.done()

        signal.abort()

        with pytest.raises(UploadAbortedError):
            await asyncio.wait_for(upload, timeout=2)

    async def test_abort_before_start(self, transport: HttpTransport) -> None:
        signal = CancelHandle()
        signal.abort()

        with pytest.raises(UploadAbortedError):
            await transport.upload(
                b"data", "http://127.0.0.1:1/upload", lambda p: None, signal
            )

    async def test_session_lifecycle(self, transport: HttpTransport) -> None:
        assert (await transport.check_health())["status"] == "idle"

        await transport.start()
        assert (await transport.check_health())["status"] == "running"

        await transport.stop()
        assert (await transport.check_health())["status"] == "idle"
