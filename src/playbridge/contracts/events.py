# src/playbridge/contracts/events.py
"""Player event vocabulary and payloads.

The bridge subscribes to a fixed set of player events. Payloads are plain
frozen dataclasses so hosts can translate native player callbacks into them
without depending on the player library.
"""

from dataclasses import dataclass
from enum import StrEnum


class PlayerEvent(StrEnum):
    """Events the bridge subscribes to on a player handle."""

    ITEM_READY = "item-ready"
    TIME = "time"
    SEEK = "seek"
    SEEKED = "seeked"
    COMPLETE = "complete"
    AD_IMPRESSION = "ad-impression"


class SinkCall(StrEnum):
    """Calls the bridge issues on an analytics sink.

    Values are the sink method names.
    """

    READY = "ready"
    TIME = "time"
    SEEK = "seek"
    SEEKED = "seeked"
    COMPLETE = "complete"
    AD_IMPRESSION = "ad_impression"
    REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class TimeParams:
    """Payload of a ``time`` progress event.

    Attributes:
        position: Current playback position in seconds
        duration: Duration of the active item in seconds
    """

    position: float
    duration: float


@dataclass(frozen=True, slots=True)
class SeekParams:
    """Payload of a ``seek`` event.

    ``duration`` is carried because some players send it, but it is not
    reliable and the bridge never forwards it.

    Attributes:
        position: Position the seek started from
        offset: Requested seek target in seconds
        duration: Duration as reported in the event payload (unreliable)
    """

    position: float
    offset: float
    duration: float | None = None
