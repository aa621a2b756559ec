# src/playbridge/telemetry/sinks/__init__.py
"""Built-in analytics sinks.

Available sinks:
- ConsoleSink ("console"): one line per call on stdout/stderr
- LogSink ("log"): one structlog event per call

Plugin registration:
    Sinks are discovered via the playbridge_get_sinks hook. The
    BuiltinSinksPlugin in this module registers the built-in sinks.
"""

from playbridge.telemetry.hookspecs import hookimpl
from playbridge.telemetry.sinks.base import CallRecordSink, token_fingerprint
from playbridge.telemetry.sinks.console import ConsoleSink
from playbridge.telemetry.sinks.log import LogSink


class BuiltinSinksPlugin:
    """Plugin that registers built-in analytics sinks."""

    @hookimpl
    def playbridge_get_sinks(self) -> list[type]:
        return [ConsoleSink, LogSink]


__all__ = [
    "BuiltinSinksPlugin",
    "CallRecordSink",
    "ConsoleSink",
    "LogSink",
    "token_fingerprint",
]
