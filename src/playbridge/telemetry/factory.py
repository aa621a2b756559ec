# src/playbridge/telemetry/factory.py
"""Factory functions for creating analytics sinks from configuration.

Glue between BridgeSettings and a runtime sink:
1. Discover sink classes via the playbridge_get_sinks pluggy hook
2. Instantiate and configure the sink named in settings
3. Wire a TelemetryBridge to it

Usage:
    settings = load_settings(Path("playbridge.yaml"))
    bridge = create_bridge(settings, identity_provider=identity)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pluggy

from playbridge.core.config import BridgeSettings
from playbridge.core.logging import get_logger
from playbridge.telemetry.bridge import TelemetryBridge
from playbridge.telemetry.errors import SinkConfigurationError
from playbridge.telemetry.hookspecs import PROJECT_NAME, PlaybridgeSinkSpec
from playbridge.telemetry.protocols import ConfigurableSinkProtocol
from playbridge.telemetry.providers import FeatureTokenProvider, IdentityProvider, StaticTokenProvider
from playbridge.telemetry.sinks import BuiltinSinksPlugin

logger = get_logger(__name__)


def _resolve_sink_name(sink_class: type[ConfigurableSinkProtocol]) -> str:
    """Resolve a sink's configuration name from its class.

    Prefers a class-level ``_name``; otherwise instantiates the class and
    reads ``name``.

    Raises:
        SinkConfigurationError: If the name is missing, empty or not a string,
            or the class cannot be instantiated.
    """
    class_name = getattr(sink_class, "__name__", None)
    if class_name is None:
        raise SinkConfigurationError("sink_plugins", f"Invalid sink declaration without __name__: {sink_class!r}")

    if "_name" in sink_class.__dict__:
        hint = sink_class.__dict__["_name"]
        if type(hint) is str and hint != "":
            return hint
        raise SinkConfigurationError(class_name, f"Sink class attribute _name must be a non-empty string, got {hint!r}")

    try:
        instance = sink_class()
    except Exception as e:
        raise SinkConfigurationError(class_name, f"Failed to instantiate sink class during discovery: {e}") from e

    resolved = instance.name
    if type(resolved) is not str or resolved == "":
        raise SinkConfigurationError(class_name, f"Sink name must be a non-empty string, got {resolved!r}")
    return resolved


def discover_sink_registry(sink_plugins: Iterable[Any] = ()) -> dict[str, type[ConfigurableSinkProtocol]]:
    """Discover sink classes via pluggy hooks.

    Registers the built-in sinks plus any plugin objects supplied by the
    caller, then collects every ``playbridge_get_sinks`` result.

    Returns:
        Mapping of sink name to sink class.

    Raises:
        SinkConfigurationError: If a plugin is invalid, returns something that
            is not an iterable of classes, or two sinks share a name.
    """
    plugin_manager = pluggy.PluginManager(PROJECT_NAME)
    plugin_manager.add_hookspecs(PlaybridgeSinkSpec)

    for plugin in [BuiltinSinksPlugin(), *sink_plugins]:
        try:
            plugin_manager.register(plugin)
            plugin_manager.check_pending()
        except (pluggy.PluginValidationError, ValueError) as e:
            # PluginValidationError: hook signature mismatch
            # ValueError: the same plugin object registered twice
            if isinstance(e, pluggy.PluginValidationError):
                plugin_manager.unregister(plugin=plugin)
            raise SinkConfigurationError(
                "sink_plugins",
                f"Invalid sink plugin {type(plugin).__name__}: {e}",
            ) from e

    registry: dict[str, type[ConfigurableSinkProtocol]] = {}
    for hook_impl in plugin_manager.hook.playbridge_get_sinks.get_hookimpls():
        plugin_name = type(hook_impl.plugin).__name__
        try:
            sink_classes = hook_impl.function()
        except Exception as e:
            raise SinkConfigurationError(
                "sink_plugins",
                f"Sink plugin {plugin_name} failed in playbridge_get_sinks: {e}",
            ) from e

        if sink_classes is None or isinstance(sink_classes, (str, bytes)):
            raise SinkConfigurationError(
                "sink_plugins",
                f"playbridge_get_sinks in plugin {plugin_name} returned {type(sink_classes).__name__}; "
                "expected iterable of sink classes",
            )
        try:
            sink_iter = iter(sink_classes)
        except TypeError as e:
            raise SinkConfigurationError(
                "sink_plugins",
                f"playbridge_get_sinks in plugin {plugin_name} returned {type(sink_classes).__name__}; "
                "expected iterable of sink classes",
            ) from e

        for sink_class in sink_iter:
            sink_name = _resolve_sink_name(sink_class)
            if sink_name in registry:
                raise SinkConfigurationError(
                    sink_name,
                    f"Duplicate sink name '{sink_name}' discovered: "
                    f"{registry[sink_name].__name__} and {sink_class.__name__}",
                )
            registry[sink_name] = sink_class

    return registry


def create_analytics_sink(
    settings: BridgeSettings,
    *,
    sink_plugins: Iterable[Any] = (),
) -> ConfigurableSinkProtocol | None:
    """Create the sink named in settings.

    Returns:
        Configured sink, or None when telemetry is disabled. A bridge given
        None never subscribes to the player.

    Raises:
        SinkConfigurationError: If discovery fails, the sink name is unknown,
            or the sink rejects its options.
    """
    if not settings.enabled:
        logger.debug("telemetry_disabled", reason="settings.enabled=False")
        return None

    registry = discover_sink_registry(sink_plugins)
    try:
        sink_class = registry[settings.sink.name]
    except KeyError:
        raise SinkConfigurationError(
            settings.sink.name,
            f"Unknown sink. Available sinks: {sorted(registry)}",
        ) from None

    sink = sink_class()
    sink.configure(dict(settings.sink.options))
    logger.debug("analytics_sink_configured", sink=settings.sink.name, options_keys=sorted(settings.sink.options))
    return sink


def create_bridge(
    settings: BridgeSettings,
    *,
    token_provider: FeatureTokenProvider | None = None,
    identity_provider: IdentityProvider | None = None,
    sink_plugins: Iterable[Any] = (),
) -> TelemetryBridge:
    """Create a TelemetryBridge wired to the configured sink.

    Without an explicit token_provider the token comes from settings.
    """
    sink = create_analytics_sink(settings, sink_plugins=sink_plugins)
    if token_provider is None:
        token_provider = StaticTokenProvider.from_settings(settings)
    return TelemetryBridge(
        sink,
        origin=settings.origin,
        token_provider=token_provider,
        identity_provider=identity_provider,
    )
