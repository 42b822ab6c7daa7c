"""
Event bus implementation for publish-subscribe messaging.

Observers such as the CLI progress reporter subscribe here to the lifecycle
events the upload manager emits. Events are queued by priority and handed
to subscribers by worker tasks running on the same event loop.
"""

import asyncio
import fnmatch
import logging
import time
import uuid
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Union

from ..interfaces.messaging import IEventBus
from ..interfaces.lifecycle import IComponent
from ..domain.events import Event, EventPriority

logger = logging.getLogger(__name__)


class EventSubscription:
    """Represents an event subscription."""

    def __init__(self, subscription_id: str, event_pattern: str,
                 handler: Callable[[Event], Any], priority: EventPriority):
        self.subscription_id = subscription_id
        self.event_pattern = event_pattern
        self.handler = handler
        self.priority = priority
        self.created_at = time.time()
        self.call_count = 0
        self.last_called: Optional[float] = None
        self.error_count = 0


class EventBus(IComponent, IEventBus):
    """
    Priority event bus.

    Supports wildcard subscriptions, sync and async handlers, and keeps
    simple delivery metrics. A failing handler never stops delivery to the
    other subscribers.
    """

    def __init__(self, max_workers: int = 1, queue_size: int = 1000):
        self._subscriptions: Dict[str, List[EventSubscription]] = defaultdict(list)
        self._wildcard_subscriptions: List[EventSubscription] = []
        self._queue_size = queue_size
        self._event_queue: Optional[asyncio.PriorityQueue[Event]] = None
        self._workers: List[asyncio.Task[None]] = []
        self._max_workers = max_workers
        self._running = False

        self._metrics: Dict[str, Any] = {
            'events_published': 0,
            'events_processed': 0,
            'events_failed': 0,
            'subscriptions_count': 0,
        }

    @property
    def name(self) -> str:
        return "EventBus"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def _queue(self) -> "asyncio.PriorityQueue[Event]":
        if self._event_queue is None:
            raise RuntimeError("Event bus is not running")
        return self._event_queue

    async def start(self) -> None:
        """Start the event bus and worker tasks."""
        if self._running:
            return

        logger.info(f"Starting event bus with {self._max_workers} workers")

        self._event_queue = asyncio.PriorityQueue(maxsize=self._queue_size)
        self._running = True
        self._workers = [
            asyncio.create_task(self._worker_process())
            for _ in range(self._max_workers)
        ]

    async def stop(self) -> None:
        """Deliver queued events, then stop the workers."""
        if not self._running:
            return

        logger.info("Stopping event bus...")

        await self.flush()
        self._running = False

        for worker in self._workers:
            worker.cancel()
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers.clear()

        self._subscriptions.clear()
        self._wildcard_subscriptions.clear()

        logger.info("Event bus stopped")

    async def flush(self) -> None:
        """Wait until every queued event has been delivered."""
        if self._event_queue is not None and self._running:
            await self._event_queue.join()

    async def check_health(self) -> Dict[str, Any]:
        return {
            'healthy': True,
            'status': 'running' if self._running else 'stopped',
            'details': {
                'workers_count': len(self._workers),
                'subscriptions_count': self._metrics['subscriptions_count'],
                'queue_size': self._event_queue.qsize() if self._event_queue else 0,
                'events_published': self._metrics['events_published'],
                'events_processed': self._metrics['events_processed'],
                'events_failed': self._metrics['events_failed']
            }
        }

    async def publish(self, event: Union[Event, str], data: Any = None,
                      priority: EventPriority = EventPriority.NORMAL) -> str:
        """Publish an event, waiting for queue space if necessary."""
        event = self._prepare(event, data, priority)
        await self._queue.put(event)
        return self._published(event)

    def publish_nowait(self, event: Union[Event, str], data: Any = None,
                       priority: EventPriority = EventPriority.NORMAL) -> str:
        """Publish an event from synchronous code on the event loop."""
        event = self._prepare(event, data, priority)
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.error(f"Event queue full, dropping event: {event.name}")
            raise RuntimeError("Event queue is full")
        return self._published(event)

    async def subscribe(self, event_name: str, handler: Callable[[Event], Any],
                        priority: EventPriority = EventPriority.NORMAL) -> str:
        """Subscribe to events with the given name pattern."""
        subscription_id = str(uuid.uuid4())
        subscription = EventSubscription(
            subscription_id=subscription_id,
            event_pattern=event_name,
            handler=handler,
            priority=priority
        )

        if '*' in event_name or '?' in event_name:
            self._wildcard_subscriptions.append(subscription)
            self._wildcard_subscriptions.sort(key=lambda s: s.priority.value, reverse=True)
        else:
            self._subscriptions[event_name].append(subscription)
            self._subscriptions[event_name].sort(key=lambda s: s.priority.value, reverse=True)

        self._metrics['subscriptions_count'] += 1

        logger.debug(f"Added subscription for '{event_name}' (ID: {subscription_id})")
        return subscription_id

    async def unsubscribe(self, subscription_id: str) -> bool:
        """Unsubscribe using subscription ID."""
        for subscriptions in list(self._subscriptions.values()) + [self._wildcard_subscriptions]:
            for i, subscription in enumerate(subscriptions):
                if subscription.subscription_id == subscription_id:
                    subscriptions.pop(i)
                    self._metrics['subscriptions_count'] -= 1
                    logger.debug(f"Removed subscription {subscription_id}")
                    return True
        return False

    async def get_metrics(self) -> Dict[str, Any]:
        return {
            **self._metrics,
            'queue_size': self._event_queue.qsize() if self._event_queue else 0,
        }

    def _prepare(self, event: Union[Event, str], data: Any,
                 priority: EventPriority) -> Event:
        if not self._running:
            raise RuntimeError("Event bus is not running")
        if isinstance(event, str):
            event = Event(name=event, data=data, priority=priority)
        return event

    def _published(self, event: Event) -> str:
        self._metrics['events_published'] += 1
        logger.debug(f"Published event: {event.name} (ID: {event.event_id})")
        return event.event_id

    async def _worker_process(self) -> None:
        """Worker process for handling events."""
        queue = self._queue
        while self._running:
            event = await queue.get()
            try:
                await self._process_event(event)
            finally:
                queue.task_done()

    async def _process_event(self, event: Event) -> None:
        """Process a single event by calling all matching handlers."""
        matching = list(self._subscriptions.get(event.name, []))
        matching.extend(
            s for s in self._wildcard_subscriptions
            if fnmatch.fnmatch(event.name, s.event_pattern)
        )
        matching.sort(key=lambda s: s.priority.value, reverse=True)

        for subscription in matching:
            try:
                result = subscription.handler(event)
                if asyncio.iscoroutine(result):
                    await result
                subscription.call_count += 1
                subscription.last_called = time.time()
            except Exception as e:
                subscription.error_count += 1
                self._metrics['events_failed'] += 1
                logger.error(f"Handler error for event {event.name}: {e}")

        self._metrics['events_processed'] += 1
