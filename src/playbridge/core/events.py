# src/playbridge/core/events.py
"""Synchronous player event bus.

Implements the player handle contract (on/off/get_duration) for hosts that
need to adapt a native player's callbacks, and for replaying recorded
sessions through the bridge. Designed so that the bridge never needs to know
which player library produced an event.
"""

from collections.abc import Callable
from typing import Any

from playbridge.contracts.events import PlayerEvent

Handler = Callable[..., None]


class PlayerEventBus:
    """In-process event source satisfying the player handle contract.

    Events are dispatched synchronously to handlers in subscription order.
    Handler exceptions propagate to the caller of emit().

    Example:
        bus = PlayerEventBus(duration=5400.0)
        bus.on(PlayerEvent.TIME, lambda params: print(params.position))
        bus.emit(PlayerEvent.TIME, TimeParams(position=12.0, duration=5400.0))
    """

    def __init__(self, duration: float = 0.0) -> None:
        self._handlers: dict[PlayerEvent, list[Handler]] = {}
        self._duration = duration

    def on(self, event: PlayerEvent, handler: Handler) -> None:
        """Register a handler for an event.

        Registering the same handler twice delivers the event twice, as
        player libraries do.
        """
        self._handlers.setdefault(PlayerEvent(event), []).append(handler)

    def off(self, event: PlayerEvent, handler: Handler) -> None:
        """Remove one registration of handler.

        Safe to call for a handler that was never registered.
        """
        handlers = self._handlers.get(PlayerEvent(event))
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return

    def emit(self, event: PlayerEvent, payload: Any = None) -> None:
        """Dispatch an event to every registered handler.

        Iterates over a snapshot so handlers may unsubscribe while the event
        is being delivered.
        """
        for handler in list(self._handlers.get(PlayerEvent(event), ())):
            handler(payload)

    def get_duration(self) -> float:
        """Duration of the active item as the player currently reports it."""
        return self._duration

    def set_duration(self, duration: float) -> None:
        self._duration = duration

    def handler_count(self, event: PlayerEvent | None = None) -> int:
        """Number of live registrations, for one event or all events."""
        if event is not None:
            return len(self._handlers.get(PlayerEvent(event), ()))
        return sum(len(handlers) for handlers in self._handlers.values())
