# src/playbridge/telemetry/__init__.py
"""Playback telemetry bridge.

Attaches to a live player, forwards its lifecycle and progress events to an
analytics sink, and guarantees clean teardown (unsubscribe, then a single
flush) whenever the session changes.

Components:
- bridge: TelemetryBridge, the stateful binder
- state: Unbound/Bound states and the pure reconcile() transition function
- subscription: idempotent Subscription handles
- protocols: PlayerHandle, AnalyticsSink, ConfigurableSinkProtocol
- providers: token and identity providers
- sinks: built-in sinks (console, log)
- hookspecs / factory: pluggy discovery and construction from settings
- errors: SinkConfigurationError

Usage:
    from playbridge.telemetry import TelemetryBridge, StaticTokenProvider

    bridge = TelemetryBridge(sink, origin="watch.example.com",
                             token_provider=StaticTokenProvider("tok"))
    bridge.load_item(ContentItem("m1", "Movie"), feed_id="shelf1")
    bridge.bind(player)
"""

from playbridge.telemetry.bridge import TelemetryBridge
from playbridge.telemetry.errors import SinkConfigurationError
from playbridge.telemetry.factory import create_analytics_sink, create_bridge, discover_sink_registry
from playbridge.telemetry.protocols import AnalyticsSink, ConfigurableSinkProtocol, PlayerHandle
from playbridge.telemetry.providers import (
    FeatureTokenProvider,
    IdentityProvider,
    StaticIdentityProvider,
    StaticTokenProvider,
    coerce_viewer_id,
)
from playbridge.telemetry.sinks import ConsoleSink, LogSink
from playbridge.telemetry.state import Bound, Session, Transition, Unbound, reconcile
from playbridge.telemetry.subscription import Subscription, subscribe

__all__ = [
    "AnalyticsSink",
    "Bound",
    "ConfigurableSinkProtocol",
    "ConsoleSink",
    "FeatureTokenProvider",
    "IdentityProvider",
    "LogSink",
    "PlayerHandle",
    "Session",
    "SinkConfigurationError",
    "StaticIdentityProvider",
    "StaticTokenProvider",
    "Subscription",
    "TelemetryBridge",
    "Transition",
    "Unbound",
    "coerce_viewer_id",
    "create_analytics_sink",
    "create_bridge",
    "discover_sink_registry",
    "reconcile",
    "subscribe",
]
