"""
Tests for application startup and component wiring.
"""

import pytest
from pathlib import Path
from typing import Iterator, List
from unittest.mock import Mock, patch

from filedrop.application.startup import ApplicationStartup
from filedrop.core.domain.events import Event, UploadEvents
from filedrop.core.domain.uploads import RawFile, UploadStatus
from filedrop.infrastructure.config.models import ApplicationConfig, UploadConfig
from filedrop.infrastructure.transport import FileSystemTransport, HttpTransport


class FailingTransport(FileSystemTransport):
    async def start(self) -> None:
        raise RuntimeError("transport unavailable")


@pytest.fixture(autouse=True)
def mock_setup_logging() -> Iterator[Mock]:
    """Keep tests from reconfiguring the global loggers."""
    with patch('filedrop.infrastructure.logging.setup.setup_logging') as mock_setup:
        yield mock_setup


@pytest.fixture
def config(tmp_path: Path) -> ApplicationConfig:
    return ApplicationConfig(upload=UploadConfig(
        upload_url=str(tmp_path / "inbox"),
        max_file_size=1024,
        allowed_types=[".txt"]
    ))


class TestApplicationStartup:
    """Test cases for ApplicationStartup."""

    def test_configure_services(self, config: ApplicationConfig) -> None:
        app = ApplicationStartup(config)

        app.configure_services()

        assert isinstance(app.transport, FileSystemTransport)
        assert app.upload_manager is not None
        assert app.upload_manager.upload_url == config.upload.upload_url
        assert app.upload_manager.policy.max_size_bytes == 1024
        assert app.upload_manager.policy.allowed_type_patterns == (".txt",)

    def test_http_transport_selected(self) -> None:
        config = ApplicationConfig(upload=UploadConfig(upload_url="https://example.com/upload"))
        app = ApplicationStartup(config)

        app.configure_services()

        assert isinstance(app.transport, HttpTransport)

    def test_transport_override(self, config: ApplicationConfig) -> None:
        transport = FileSystemTransport(chunk_size=1)
        app = ApplicationStartup(config, transport=transport)

        app.configure_services()

        assert app.transport is transport

    async def test_start_and_stop(self, config: ApplicationConfig,
                                  mock_setup_logging: Mock) -> None:
        app = ApplicationStartup(config)

        await app.start_application()
        assert app.event_bus is not None and app.event_bus.is_running
        assert app.upload_manager is not None
        assert (await app.upload_manager.check_health())["healthy"]
        mock_setup_logging.assert_called_once_with(config.logging)

        await app.stop_application()
        assert not app.event_bus.is_running
        assert not (await app.upload_manager.check_health())["healthy"]

    async def test_start_failure_rolls_back(self, config: ApplicationConfig) -> None:
        app = ApplicationStartup(config, transport=FailingTransport())

        with pytest.raises(RuntimeError, match="transport unavailable"):
            await app.start_application()

        assert app.event_bus is not None
        assert not app.event_bus.is_running
        assert app.upload_manager is not None
        assert not (await app.upload_manager.check_health())["healthy"]

    async def test_end_to_end_upload(self, config: ApplicationConfig, tmp_path: Path) -> None:
        """Accepted files land in the inbox; rejected ones never reach it."""
        completed: List[Event] = []

        async with ApplicationStartup(config) as app:
            assert app.event_bus is not None and app.upload_manager is not None
            await app.event_bus.subscribe(UploadEvents.COMPLETE, completed.append)

            records = app.upload_manager.submit([
                RawFile("notes.txt", 5, "text/plain", b"hello"),
                RawFile("photo.png", 3, "image/png", b"png"),
            ])
            await app.upload_manager.wait_idle()
            await app.event_bus.flush()

        assert [r.status for r in records] == [UploadStatus.COMPLETE, UploadStatus.REJECTED]
        assert records[0].progress_percent == 100
        assert records[0].response["size"] == 5
        assert (tmp_path / "inbox" / "notes.txt").read_bytes() == b"hello"
        assert not (tmp_path / "inbox" / "photo.png").exists()
        assert len(completed) == 1
        assert completed[0].data["record"] is records[0]
        assert completed[0].source == "UploadManager"
