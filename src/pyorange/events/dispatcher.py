from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Mapping, Union

from .types import AgentEvent, EventType

Handler = Callable[[Any], Union[Awaitable[None], None]]


class EventDispatcher:
    """Callback table: one handler per event type.

    Handlers may be plain functions or coroutines; coroutine handlers are
    awaited before `emit` returns, so a handler that waits for user input
    holds back the emitter until it is done.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, Handler] = {}

    def on(self, handlers: Mapping[EventType | str, Handler]) -> None:
        for key, fn in handlers.items():
            self._handlers[EventType(key)] = fn

    def has_handler(self, event_type: EventType) -> bool:
        return event_type in self._handlers

    async def emit(self, event: AgentEvent) -> bool:
        """Deliver `event`; returns False when nobody is subscribed to it."""
        fn = self._handlers.get(event.type)
        if fn is None:
            return False
        res = fn(event)
        if inspect.isawaitable(res):
            await res
        return True
