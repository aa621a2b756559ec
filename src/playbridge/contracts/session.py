# src/playbridge/contracts/session.py
"""Session data model for the telemetry bridge.

A session is the tuple of inputs one live subscription set is bound to.
Values are captured when the session is established and never re-read, so
events are never stamped with a stale item or token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playbridge.telemetry.protocols import PlayerHandle


@dataclass(frozen=True, slots=True)
class ContentItem:
    """Media currently loaded in the player.

    Attributes:
        item_id: Stable media identifier
        title: Display title
    """

    item_id: str
    title: str

    def __post_init__(self) -> None:
        if not self.item_id:
            raise ValueError("ContentItem requires a non-empty item_id")


@dataclass(frozen=True, slots=True, eq=False)
class SessionInputs:
    """Everything a subscription set is bound to.

    Equality is not value-based: the player handle is compared by identity
    (players may define their own ``__eq__``), everything else by value.
    Use ``same_as()``.

    Attributes:
        player: Active player handle, or None
        item: Loaded content item, or None
        token: Analytics token; None or empty disables telemetry
        viewer_id: Signed-in viewer id, None for anonymous viewers
        feed_id: Feed or shelf that surfaced the item (attribution)
    """

    player: PlayerHandle | None = None
    item: ContentItem | None = None
    token: str | None = None
    viewer_id: int | None = None
    feed_id: str = ""

    @property
    def complete(self) -> bool:
        """True when player, item and token are all present."""
        return self.player is not None and self.item is not None and bool(self.token)

    @property
    def missing(self) -> tuple[str, ...]:
        """Names of required inputs that are absent (for logging)."""
        absent: list[str] = []
        if self.player is None:
            absent.append("player")
        if self.item is None:
            absent.append("item")
        if not self.token:
            absent.append("token")
        return tuple(absent)

    def same_as(self, other: SessionInputs) -> bool:
        return (
            self.player is other.player
            and self.item == other.item
            and self.token == other.token
            and self.viewer_id == other.viewer_id
            and self.feed_id == other.feed_id
        )
