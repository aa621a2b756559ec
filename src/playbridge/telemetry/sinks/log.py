# src/playbridge/telemetry/sinks/log.py
"""Sink that records each analytics call as a structured log event."""

from __future__ import annotations

import logging
from typing import Any

from playbridge.contracts.events import SinkCall
from playbridge.core.logging import get_logger
from playbridge.telemetry.errors import SinkConfigurationError
from playbridge.telemetry.sinks.base import CallRecordSink, token_fingerprint


class LogSink(CallRecordSink):
    """Emit ``analytics_call`` log events through structlog.

    Configuration options:
        level: "debug", "info" (default) or "warning"
        logger_name: Logger name (default "playbridge.analytics")

    Tokens are always logged as fingerprints.
    """

    _name = "log"

    _VALID_LEVELS: frozenset[str] = frozenset({"debug", "info", "warning"})

    def __init__(self) -> None:
        self._level = logging.INFO
        self._logger: Any = get_logger("playbridge.analytics")

    @property
    def name(self) -> str:
        return self._name

    def configure(self, options: dict[str, Any]) -> None:
        """Validate and apply options.

        Raises:
            SinkConfigurationError: If level or logger_name are invalid
        """
        level = options.get("level", "info")
        if not isinstance(level, str) or level.lower() not in self._VALID_LEVELS:
            raise SinkConfigurationError(
                self._name,
                f"Invalid level {level!r}. Must be one of: {', '.join(sorted(self._VALID_LEVELS))}",
            )
        self._level = getattr(logging, level.upper())

        logger_name = options.get("logger_name", "playbridge.analytics")
        if not isinstance(logger_name, str) or not logger_name:
            raise SinkConfigurationError(self._name, f"'logger_name' must be a non-empty string, got {logger_name!r}")
        self._logger = get_logger(logger_name)

    def _emit(self, call: SinkCall, fields: dict[str, Any]) -> None:
        if "token" in fields:
            fields = {**fields, "token": token_fingerprint(fields["token"])}
        self._logger.log(self._level, "analytics_call", call=call.value, **fields)

    def close(self) -> None:
        """No resources to release."""
