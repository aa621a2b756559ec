# src/playbridge/telemetry/bridge.py
"""TelemetryBridge forwards player events to an analytics sink.

The bridge is the only stateful piece of playbridge:
1. Collects the session inputs (player, item, token, viewer, feed)
2. Runs reconcile() whenever any of them may have changed
3. Tears down the old subscription set (unsubscribe, then flush) before
   installing a new one
4. Forwards six player events to the sink with the values captured when the
   session was bound

Design principles:
- Telemetry loss must never affect playback: sink and player failures on the
  playback path are logged, never raised
- Absent inputs are not errors: telemetry is simply inactive
- Handlers close over the bound session, never over live bridge state
- A sink or provider may call back into the bridge; nested updates are
  folded into the reconcile already running, never run inside it

Thread Safety:
    None. All calls are expected on the host's UI/event thread, the same
    thread the player delivers events on.
"""

from collections.abc import Callable, Mapping
from typing import Any

from playbridge.contracts.events import PlayerEvent, SinkCall
from playbridge.contracts.session import ContentItem, SessionInputs
from playbridge.core.logging import get_logger
from playbridge.telemetry.protocols import AnalyticsSink, PlayerHandle
from playbridge.telemetry.providers import FeatureTokenProvider, IdentityProvider
from playbridge.telemetry.state import UNBOUND, Bound, BridgeState, Session, Transition, reconcile
from playbridge.telemetry.subscription import subscribe

logger = get_logger(__name__)


class MalformedPayloadError(Exception):
    """A player event payload lacks a field the bridge needs."""


def _payload_value(payload: Any, key: str) -> Any:
    """Read key from an event payload object or mapping."""
    try:
        if isinstance(payload, Mapping):
            return payload[key]
        return getattr(payload, key)
    except (KeyError, AttributeError) as e:
        raise MalformedPayloadError(f"payload {type(payload).__name__} has no {key!r}") from e


class TelemetryBridge:
    """Binds one player at a time to an analytics sink.

    Example:
        >>> bridge = TelemetryBridge(sink, origin="watch.example.com",
        ...                          token_provider=tokens, identity_provider=identity)
        >>> bridge.load_item(ContentItem("m1", "Movie"), feed_id="shelf1")
        >>> bridge.bind(player)      # subscribes
        >>> bridge.bind(None)        # unsubscribes, then flushes once
        >>> bridge.close()
    """

    _LOG_INTERVAL = 100  # Log every 100 sink failures after the first

    def __init__(
        self,
        sink: AnalyticsSink | None,
        *,
        origin: str,
        token_provider: FeatureTokenProvider | None = None,
        identity_provider: IdentityProvider | None = None,
    ) -> None:
        """Initialize an unbound bridge.

        Args:
            sink: Analytics sink, or None when no collector is installed
                (the bridge then never subscribes)
            origin: Collector origin passed to every ready() call
            token_provider: Source of the analytics token. None disables
                telemetry.
            identity_provider: Source of the viewer id. None means anonymous.
        """
        self._sink = sink
        self._origin = origin
        self._token_provider = token_provider
        self._identity_provider = identity_provider

        self._player: PlayerHandle | None = None
        self._item: ContentItem | None = None
        self._feed_id = ""
        self._state: BridgeState = UNBOUND
        self._closed = False

        # Re-entrance guard: a sink or provider calling back into the bridge
        # during a reconcile marks it dirty instead of nesting a second one.
        self._reconciling = False
        self._dirty = False

        # Health metrics
        self._calls_forwarded = 0
        self._sink_failures = 0
        self._last_logged_failure_count = 0
        self._sessions_bound = 0
        self._sessions_released = 0

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def bind(self, player: PlayerHandle | None) -> None:
        """Attach to player, or detach with None.

        Called by the host whenever the active player instance changes,
        including on unmount and navigation.

        Raises:
            TypeError: If player does not implement the player handle contract
        """
        if player is not None and not isinstance(player, PlayerHandle):
            raise TypeError(f"{type(player).__name__} does not implement on/off/get_duration")
        self._player = player
        self._recompute()

    def load_item(self, item: ContentItem | None, feed_id: str | None = "") -> None:
        """Update the content context: loaded item and the feed it came from."""
        self._item = item
        self._feed_id = feed_id or ""
        self._recompute()

    def refresh(self) -> None:
        """Re-read the token and identity providers and reconcile.

        Hosts call this when they observe a sign-in/sign-out or a feature
        configuration change.
        """
        self._recompute()

    def close(self) -> None:
        """Release any bound session. Safe to call more than once."""
        if self._closed:
            return
        state = self._state
        self._state = UNBOUND
        self._player = None
        self._closed = True
        if isinstance(state, Bound):
            self._teardown(state.session)
        logger.debug("telemetry_bridge_closed", **self.health_metrics)

    @property
    def state(self) -> BridgeState:
        return self._state

    @property
    def bound(self) -> bool:
        return isinstance(self._state, Bound)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def health_metrics(self) -> dict[str, Any]:
        """Snapshot of forwarding health.

        - calls_forwarded: sink calls that returned normally
        - sink_failures: sink calls that raised
        - sessions_bound / sessions_released: subscription sets installed
          and torn down
        """
        return {
            "calls_forwarded": self._calls_forwarded,
            "sink_failures": self._sink_failures,
            "sessions_bound": self._sessions_bound,
            "sessions_released": self._sessions_released,
        }

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def _read_provider(self, provider: str, read: Callable[[], Any]) -> Any:
        """Call a provider, treating any failure as an absent value."""
        try:
            return read()
        except Exception as e:
            logger.warning(
                "provider_read_failed",
                provider=provider,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    def _current_inputs(self) -> SessionInputs:
        token = None
        if self._token_provider is not None:
            token = self._read_provider("token", self._token_provider.analytics_token)
        viewer_id = None
        if self._identity_provider is not None:
            viewer_id = self._read_provider("identity", self._identity_provider.viewer_id)
        return SessionInputs(
            player=self._player,
            item=self._item,
            token=token,
            viewer_id=viewer_id,
            feed_id=self._feed_id,
        )

    def _recompute(self) -> None:
        if self._closed:
            logger.debug("telemetry_bridge_closed_ignoring_update")
            return

        if self._reconciling:
            self._dirty = True
            return

        self._reconciling = True
        try:
            self._dirty = True
            while self._dirty and not self._closed:
                self._dirty = False
                inputs = self._current_inputs()
                transition = reconcile(self._state, inputs, sink_available=self._sink is not None)
                self._apply(transition, inputs)
        finally:
            self._reconciling = False

    def _apply(self, transition: Transition, inputs: SessionInputs) -> None:
        if transition.is_noop:
            if not isinstance(self._state, Bound):
                logger.debug(
                    "telemetry_inactive",
                    missing=inputs.missing,
                    sink_installed=self._sink is not None,
                )
            return

        # Teardown strictly before setup. The state is cleared before the
        # flush so a callback from remove() never sees the old session.
        if transition.teardown is not None:
            self._state = UNBOUND
            self._teardown(transition.teardown)
            if self._dirty or self._closed:
                # Inputs changed during the flush; the next pass re-reads them
                return

        if transition.setup is not None:
            session = self._setup(transition.setup)
            if session is not None:
                self._state = Bound(session)

    def _teardown(self, session: Session) -> None:
        """Unsubscribe every handler of session, then flush exactly once."""
        if session.released:
            return
        session.released = True
        for subscription in session.subscriptions:
            subscription.unsubscribe()
        self._forward(SinkCall.REMOVE)
        self._sessions_released += 1
        logger.debug(
            "telemetry_session_released",
            item_id=session.inputs.item.item_id if session.inputs.item else None,
        )

    def _setup(self, inputs: SessionInputs) -> Session | None:
        """Install a fresh subscription set bound to inputs.

        Returns None (and leaves nothing subscribed) if the player refuses a
        subscription.
        """
        player = inputs.player
        assert player is not None  # reconcile() only sets up complete inputs
        session = Session(inputs=inputs)
        handlers = self._make_handlers(session)
        try:
            for event, handler in handlers.items():
                session.subscriptions.append(subscribe(player, event, handler))
        except Exception as e:
            logger.error(
                "telemetry_subscribe_failed",
                error=str(e),
                error_type=type(e).__name__,
                installed=len(session.subscriptions),
            )
            session.released = True
            for subscription in session.subscriptions:
                subscription.unsubscribe()
            return None

        self._sessions_bound += 1
        logger.debug(
            "telemetry_session_bound",
            item_id=inputs.item.item_id if inputs.item else None,
            feed_id=inputs.feed_id,
            viewer_id=inputs.viewer_id,
        )
        return session

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _make_handlers(self, session: Session) -> dict[PlayerEvent, Any]:
        """Build handlers that close over the session's captured values."""
        inputs = session.inputs
        player = inputs.player
        assert player is not None
        token = inputs.token
        item = inputs.item
        viewer_id = inputs.viewer_id
        feed_id = inputs.feed_id
        origin = self._origin

        def on_item_ready(_payload: Any = None) -> None:
            if session.released or not token or item is None:
                return
            self._forward(SinkCall.READY, token, origin, feed_id, item.item_id, item.title, viewer_id)

        def on_time(payload: Any) -> None:
            if session.released:
                return
            try:
                position = _payload_value(payload, "position")
                duration = _payload_value(payload, "duration")
            except MalformedPayloadError as e:
                logger.warning("malformed_player_payload", player_event=PlayerEvent.TIME.value, error=str(e))
                return
            self._forward(SinkCall.TIME, position, duration)

        def on_seek(payload: Any) -> None:
            if session.released:
                return
            try:
                offset = _payload_value(payload, "offset")
            except MalformedPayloadError as e:
                logger.warning("malformed_player_payload", player_event=PlayerEvent.SEEK.value, error=str(e))
                return
            # The payload's duration is unreliable; the collector expects the
            # duration the player reports at seek time.
            try:
                duration = player.get_duration()
            except Exception as e:
                logger.warning("player_duration_unavailable", error=str(e), error_type=type(e).__name__)
                return
            self._forward(SinkCall.SEEK, offset, duration)

        def on_seeked(_payload: Any = None) -> None:
            if not session.released:
                self._forward(SinkCall.SEEKED)

        def on_complete(_payload: Any = None) -> None:
            if not session.released:
                self._forward(SinkCall.COMPLETE)

        def on_ad_impression(_payload: Any = None) -> None:
            if not session.released:
                self._forward(SinkCall.AD_IMPRESSION)

        return {
            PlayerEvent.ITEM_READY: on_item_ready,
            PlayerEvent.TIME: on_time,
            PlayerEvent.SEEK: on_seek,
            PlayerEvent.SEEKED: on_seeked,
            PlayerEvent.COMPLETE: on_complete,
            PlayerEvent.AD_IMPRESSION: on_ad_impression,
        }

    def _forward(self, call: SinkCall, *args: Any) -> None:
        """Issue one sink call. Never raises."""
        sink = self._sink
        if sink is None:
            return
        try:
            getattr(sink, call.value)(*args)
        except Exception as e:
            self._sink_failures += 1
            first_failure = self._sink_failures == 1
            if first_failure or self._sink_failures - self._last_logged_failure_count >= self._LOG_INTERVAL:
                logger.warning(
                    "analytics_sink_call_failed",
                    call=call.value,
                    error=str(e),
                    error_type=type(e).__name__,
                    failures_since_last_log=self._sink_failures - self._last_logged_failure_count,
                    failures_total=self._sink_failures,
                )
                self._last_logged_failure_count = self._sink_failures
            return
        self._calls_forwarded += 1
