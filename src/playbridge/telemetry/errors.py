# src/playbridge/telemetry/errors.py
"""Telemetry-specific exceptions.

Only raised while building a sink from configuration. Nothing on the
playback path raises: forwarding failures are logged instead.
"""


class SinkConfigurationError(Exception):
    """Raised when a sink cannot be discovered, instantiated or configured.

    Attributes:
        sink_name: Name of the sink (or plugin group) that failed
        message: Human-readable error description
    """

    def __init__(self, sink_name: str, message: str) -> None:
        self.sink_name = sink_name
        self.message = message
        super().__init__(f"Sink '{sink_name}' failed: {message}")
