# src/playbridge/telemetry/subscription.py
"""Explicit subscription handles for player event handlers."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from playbridge.contracts.events import PlayerEvent
from playbridge.core.logging import get_logger

if TYPE_CHECKING:
    from playbridge.telemetry.protocols import PlayerHandle

logger = get_logger(__name__)


class Subscription:
    """One handler registered on one player event.

    unsubscribe() removes the registration at most once. A player that has
    already been destroyed may raise from off(); that is logged and the
    subscription is still considered released.
    """

    __slots__ = ("_active", "event", "handler", "player")

    def __init__(self, player: PlayerHandle, event: PlayerEvent, handler: Callable[..., None]) -> None:
        self.player = player
        self.event = event
        self.handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        try:
            self.player.off(self.event, self.handler)
        except Exception as e:
            logger.warning(
                "player_unsubscribe_failed",
                player_event=str(self.event),
                error=str(e),
                error_type=type(e).__name__,
            )

    def __repr__(self) -> str:
        state = "active" if self._active else "released"
        return f"Subscription({self.event!s}, {state})"


def subscribe(player: PlayerHandle, event: PlayerEvent, handler: Callable[..., None]) -> Subscription:
    """Register handler on player and return its subscription handle.

    Errors from on() propagate: a player that refuses subscriptions is a
    host bug, not a telemetry condition.
    """
    player.on(event, handler)
    return Subscription(player, event, handler)
