"""In-process fan-out of committed domain events.

The dispatcher is owned by the API layer. Services never call it; they
return events, and routers dispatch them after the database write is
durable. Delivery is best-effort and in-order per dispatch call: a failing
subscriber is logged and counted, and the remaining subscribers still run.

Example:
    dispatcher = EventDispatcher()
    dispatcher.subscribe(realtime_manager.handle_event, name="realtime")
    await dispatcher.dispatch(events)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from campus_service.core.events.base import DomainEvent
from campus_service.infra.logging import get_lazy_logger
from campus_service.infra.metrics.tracking import (
    track_event_dispatched,
    track_subscriber_failure,
)

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)

Subscriber = Callable[[DomainEvent], Awaitable[None]]


class EventDispatcher:
    """Deliver events to registered async subscribers."""

    def __init__(self) -> None:
        self._subscribers: dict[str, Subscriber] = {}

    def subscribe(self, subscriber: Subscriber, *, name: str | None = None) -> Callable[[], None]:
        """Register a subscriber.

        Returns:
            A callable that removes the subscriber again.
        """
        key = name or getattr(subscriber, "__qualname__", repr(subscriber))
        self._subscribers[key] = subscriber
        logger.debug("Event subscriber registered", extra={"subscriber": key})

        def _unsubscribe() -> None:
            self._subscribers.pop(key, None)

        return _unsubscribe

    @property
    def subscriber_names(self) -> list[str]:
        return list(self._subscribers)

    async def dispatch(self, events: Iterable[DomainEvent]) -> int:
        """Deliver each event to every subscriber.

        Returns:
            Number of events dispatched.
        """
        count = 0
        for event in events:
            count += 1
            track_event_dispatched(event.event_type)
            lazy_logger.debug(
                lambda event=event: f"dispatching {event.event_type} to {len(self._subscribers)} subscribers"
            )
            for name, subscriber in list(self._subscribers.items()):
                try:
                    await subscriber(event)
                except Exception:
                    track_subscriber_failure(name)
                    logger.exception(
                        "Event subscriber failed",
                        extra={"subscriber": name, "event_type": event.event_type, "event_id": event.event_id},
                    )
        return count


__all__ = ["EventDispatcher", "Subscriber"]
