# src/playbridge/telemetry/hookspecs.py
"""pluggy hook specifications for analytics sinks.

Usage (implementing a sink plugin):
    from playbridge.telemetry.hookspecs import hookimpl

    class MySinkPlugin:
        @hookimpl
        def playbridge_get_sinks(self):
            return [MySink]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from playbridge.telemetry.protocols import ConfigurableSinkProtocol

PROJECT_NAME = "playbridge"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class PlaybridgeSinkSpec:
    """Hook specifications for analytics sink plugins."""

    @hookspec
    def playbridge_get_sinks(self) -> list[type["ConfigurableSinkProtocol"]]:  # type: ignore[empty-body]
        """Return analytics sink classes (not instances).

        Classes must be constructible with no arguments and implement
        ConfigurableSinkProtocol.
        """
