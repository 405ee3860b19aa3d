"""Event dispatcher dependency."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from campus_service.core.events import EventDispatcher


def get_event_dispatcher(request: Request) -> EventDispatcher:
    """Dispatcher created by the application factory."""
    return request.app.state.dispatcher


DispatcherDep = Annotated[EventDispatcher, Depends(get_event_dispatcher)]
