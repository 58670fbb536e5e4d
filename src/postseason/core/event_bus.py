"""In-memory synchronous event bus for postseason lifecycle notifications.

Pub/sub pattern: the controller publishes events, external collaborators
(calendar, presentation, awards, history) subscribe. Delivery is synchronous
and in emission order. If no subscribers are listening, events are silently
dropped.
"""

from __future__ import annotations

import contextlib
import logging
from collections import defaultdict, deque
from collections.abc import Callable, Iterator
from typing import Any

logger = logging.getLogger(__name__)

Envelope = dict[str, Any]
Handler = Callable[[Envelope], None]


class EventBus:
    """Synchronous pub/sub event bus.

    Usage:
        bus = EventBus()

        # Callback observer
        bus.on("playoffs.series_completed", handle_series)

        # Queue-backed subscriber
        with bus.subscribe("playoffs.champion_crowned") as sub:
            controller.record_playoff_game_result(...)
            for event in sub:
                ...

        # Publisher (controller)
        bus.publish("playoffs.phase_changed", {"to_phase": "finals"})
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscription]] = defaultdict(list)
        self._wildcard_subscribers: list[Subscription] = []
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._wildcard_handlers: list[Handler] = []

    def publish(self, event_type: str, data: dict[str, Any]) -> int:
        """Deliver an event to all subscribers of this type + wildcard subscribers.

        Handlers run before queued subscriptions, each group in registration
        order. Returns the number of subscribers that received the event.
        """
        envelope: Envelope = {"type": event_type, "data": data}
        count = 0

        for handler in [*self._handlers.get(event_type, []), *self._wildcard_handlers]:
            try:
                handler(envelope)
                count += 1
            except Exception:  # a failing handler never blocks the remaining subscribers
                logger.exception("event_handler_failed type=%s handler=%r", event_type, handler)

        for sub in self._subscribers.get(event_type, []):
            if sub._offer(envelope):
                count += 1
            else:
                logger.warning("Dropping event %s for slow subscriber", event_type)

        for sub in self._wildcard_subscribers:
            if sub._offer(envelope):
                count += 1
            else:
                logger.warning("Dropping wildcard event %s for slow subscriber", event_type)

        return count

    def on(self, event_type: str | None, handler: Handler) -> Handler:
        """Register a callback for one event type (or every event if None)."""
        if event_type is None:
            self._wildcard_handlers.append(handler)
        else:
            self._handlers[event_type].append(handler)
        return handler

    def off(self, event_type: str | None, handler: Handler) -> None:
        """Remove a callback registered with ``on``. Unknown handlers are ignored."""
        with contextlib.suppress(ValueError):
            if event_type is None:
                self._wildcard_handlers.remove(handler)
            else:
                self._handlers[event_type].remove(handler)

    def subscribe(self, event_type: str | None = None, max_size: int = 100) -> Subscription:
        """Create a subscription for a specific event type (or all events if None).

        Returns a Subscription that works as an iterator over buffered events.
        Must be used as a context manager to ensure cleanup.
        """
        return Subscription(self, event_type, max_size)

    def _register(self, sub: Subscription, event_type: str | None) -> None:
        if event_type is None:
            self._wildcard_subscribers.append(sub)
        else:
            self._subscribers[event_type].append(sub)

    def _unregister(self, sub: Subscription, event_type: str | None) -> None:
        if event_type is None:
            with contextlib.suppress(ValueError):
                self._wildcard_subscribers.remove(sub)
        else:
            with contextlib.suppress(ValueError):
                self._subscribers[event_type].remove(sub)

    @property
    def subscriber_count(self) -> int:
        """Total number of active subscriptions and handlers."""
        typed = sum(len(subs) for subs in self._subscribers.values())
        handlers = sum(len(hs) for hs in self._handlers.values())
        return typed + len(self._wildcard_subscribers) + handlers + len(self._wildcard_handlers)


class Subscription:
    """An active subscription to the event bus. Use as context manager + iterator."""

    def __init__(self, bus: EventBus, event_type: str | None, max_size: int) -> None:
        self._bus = bus
        self._event_type = event_type
        self._max_size = max_size
        self._buffer: deque[Envelope] = deque()
        self._active = False

    def __enter__(self) -> Subscription:
        self._bus._register(self, self._event_type)
        self._active = True
        return self

    def __exit__(self, *args: object) -> None:
        self._active = False
        self._bus._unregister(self, self._event_type)

    def _offer(self, envelope: Envelope) -> bool:
        if len(self._buffer) >= self._max_size:
            return False
        self._buffer.append(envelope)
        return True

    def __iter__(self) -> Iterator[Envelope]:
        while self._buffer:
            yield self._buffer.popleft()

    def __len__(self) -> int:
        return len(self._buffer)

    def get(self) -> Envelope | None:
        """Pop the oldest buffered event. Returns None when nothing is waiting."""
        if not self._buffer:
            return None
        return self._buffer.popleft()

    def drain(self) -> list[Envelope]:
        """Pop every buffered event, oldest first."""
        return list(self)
