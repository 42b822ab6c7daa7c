"""
Messaging interfaces for the event bus.

Observers subscribe to upload lifecycle events through this contract; they
never talk to the upload manager's records directly.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Union

from ..domain.events import Event, EventPriority


class IEventBus(ABC):
    """Interface for event bus implementations."""

    @abstractmethod
    async def publish(self, event: Union[Event, str], data: Any = None,
                      priority: EventPriority = EventPriority.NORMAL) -> str:
        """
        Publish an event to the event bus.

        Args:
            event: Event object or event name string
            data: Event data (if event is a string)
            priority: Event priority (if event is a string)

        Returns:
            Event ID for tracking
        """
        pass

    @abstractmethod
    def publish_nowait(self, event: Union[Event, str], data: Any = None,
                       priority: EventPriority = EventPriority.NORMAL) -> str:
        """
        Publish an event without suspending the caller.

        Used from synchronous code running on the event loop, such as
        transport callbacks.

        Returns:
            Event ID for tracking
        """
        pass

    @abstractmethod
    async def subscribe(self, event_name: str, handler: Callable[[Event], Any],
                        priority: EventPriority = EventPriority.NORMAL) -> str:
        """
        Subscribe to events with the given name.

        Args:
            event_name: Name of events to subscribe to (supports wildcards)
            handler: Sync or async function to handle events
            priority: Handler priority for ordering

        Returns:
            Subscription ID for unsubscribing
        """
        pass

    @abstractmethod
    async def unsubscribe(self, subscription_id: str) -> bool:
        """
        Unsubscribe from events using subscription ID.

        Returns:
            True if successfully unsubscribed
        """
        pass

    @abstractmethod
    async def get_metrics(self) -> Dict[str, Any]:
        """Get event bus metrics."""
        pass
