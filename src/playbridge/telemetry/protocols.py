# src/playbridge/telemetry/protocols.py
"""Protocol definitions for the bridge's external collaborators.

None of these are owned by the bridge. The host application supplies the
player handle, the providers and the sink; the bridge only observes and
forwards.
"""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from playbridge.contracts.events import PlayerEvent


@runtime_checkable
class PlayerHandle(Protocol):
    """Live media-player instance.

    Contract:
        - off() must be safe for a handler that was never registered
        - get_duration() reports the duration of the active item
        - the bridge never calls anything that changes playback state
    """

    def on(self, event: PlayerEvent, handler: Callable[..., None]) -> Any: ...

    def off(self, event: PlayerEvent, handler: Callable[..., None]) -> Any: ...

    def get_duration(self) -> float: ...


@runtime_checkable
class AnalyticsSink(Protocol):
    """External collector receiving playback telemetry calls.

    Calls are fire-and-forget. The bridge isolates playback from sink
    failures, but sinks should still avoid raising.
    """

    def ready(
        self,
        token: str,
        origin: str,
        feed_id: str,
        item_id: str,
        title: str,
        viewer_id: int | None,
    ) -> None:
        """A new item became active in the player."""
        ...

    def time(self, position: float, duration: float) -> None:
        """Playback progress."""
        ...

    def seek(self, offset: float, duration: float) -> None:
        """The viewer requested a seek to offset."""
        ...

    def seeked(self) -> None:
        """The requested seek completed."""
        ...

    def complete(self) -> None:
        """Playback reached the end of the item."""
        ...

    def ad_impression(self) -> None:
        """An ad was shown."""
        ...

    def remove(self) -> None:
        """Flush: report watch time accrued since the last time() call."""
        ...


@runtime_checkable
class ConfigurableSinkProtocol(AnalyticsSink, Protocol):
    """Sink discoverable through the ``playbridge_get_sinks`` hook.

    Lifecycle:
        1. Discovery: hook returns sink classes
        2. Instantiation: the factory calls the class with no arguments
        3. Configuration: configure() with options from settings
        4. Operation: AnalyticsSink calls
        5. Shutdown: close(), idempotent

    Error handling:
        - configure() MUST raise SinkConfigurationError on invalid options
        - close() MUST be safe to call more than once
    """

    @property
    def name(self) -> str:
        """Sink name referenced by ``sink.name`` in settings."""
        ...

    def configure(self, options: dict[str, Any]) -> None: ...

    def close(self) -> None: ...
