"""
Application startup and configuration logic.

This module builds the application components from an ``ApplicationConfig``,
starts them in dependency order and stops them in reverse.
"""

import logging
from typing import List, Optional

from ..core.interfaces.lifecycle import IComponent
from ..core.interfaces.upload import ITransport
from ..core.services.event_bus import EventBus
from ..core.services.upload_manager import UploadManager
from ..infrastructure.config.models import ApplicationConfig
from ..infrastructure.logging.setup import LoggingManager
from ..infrastructure.transport import create_transport

logger = logging.getLogger(__name__)


class ApplicationStartup:
    """
    Manages application startup and component wiring.

    Components are created once in ``configure_services`` and started in
    the order logging, event bus, transport, upload manager.
    """

    def __init__(self, config: ApplicationConfig,
                 transport: Optional[ITransport] = None) -> None:
        self._config = config
        self._transport_override = transport
        self._components: List[IComponent] = []
        self._started_components: List[IComponent] = []

        self.logging_manager: Optional[LoggingManager] = None
        self.event_bus: Optional[EventBus] = None
        self.transport: Optional[ITransport] = None
        self.upload_manager: Optional[UploadManager] = None

    @property
    def config(self) -> ApplicationConfig:
        return self._config

    def configure_services(self) -> None:
        """Create every component from the configuration."""
        if self._components:
            return

        upload = self._config.upload
        transport_config = self._config.transport

        self.logging_manager = LoggingManager(self._config.logging)
        self.event_bus = EventBus()
        self.transport = self._transport_override or create_transport(
            upload.upload_url,
            timeout=transport_config.timeout,
            chunk_size=transport_config.chunk_size,
            field_name=upload.field_name,
            headers=transport_config.headers
        )
        self.upload_manager = UploadManager(
            transport=self.transport,
            upload_url=upload.upload_url,
            max_file_size=upload.max_file_size,
            allowed_types=upload.allowed_types,
            event_bus=self.event_bus,
            max_concurrent_uploads=upload.max_concurrent_uploads
        )

        self._components = [self.logging_manager, self.event_bus]
        if isinstance(self.transport, IComponent):
            self._components.append(self.transport)
        self._components.append(self.upload_manager)

    async def start_application(self) -> None:
        """Start all components; on failure, stop the ones already started."""
        self.configure_services()

        for component in self._components:
            try:
                await component.start()
                self._started_components.append(component)
                logger.debug(f"Started component: {component.name}")
            except Exception as e:
                logger.error(f"Failed to start component {component.name}: {e}")
                await self.stop_application()
                raise

        logger.info(f"{self._config.name} v{self._config.version} started")

    async def stop_application(self) -> None:
        """Stop all started components in reverse order."""
        for component in reversed(self._started_components):
            try:
                await component.stop()
                logger.debug(f"Stopped component: {component.name}")
            except Exception as e:
                logger.error(f"Error stopping component {component.name}: {e}")

        self._started_components.clear()

    async def __aenter__(self) -> 'ApplicationStartup':
        await self.start_application()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop_application()
