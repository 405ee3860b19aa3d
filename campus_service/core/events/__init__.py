"""Domain events and their in-process dispatcher."""

from campus_service.core.events.base import DomainEvent
from campus_service.core.events.dispatcher import EventDispatcher, Subscriber

__all__ = ["DomainEvent", "EventDispatcher", "Subscriber"]
