# src/playbridge/telemetry/sinks/console.py
"""Console sink for analytics calls.

Writes one line per call to stdout or stderr, as JSON or human-readable
text. Used for local debugging and for replaying recorded sessions.
"""

from __future__ import annotations

import json
import sys
from typing import Any, Literal, TextIO, TypeGuard

from playbridge.contracts.events import SinkCall
from playbridge.core.logging import get_logger
from playbridge.telemetry.errors import SinkConfigurationError
from playbridge.telemetry.sinks.base import CallRecordSink, token_fingerprint

logger = get_logger(__name__)


def _is_valid_format(v: str) -> TypeGuard[Literal["json", "pretty"]]:
    return v in {"json", "pretty"}


def _is_valid_output(v: str) -> TypeGuard[Literal["stdout", "stderr"]]:
    return v in {"stdout", "stderr"}


class ConsoleSink(CallRecordSink):
    """Print analytics calls to the console.

    Configuration options:
        format: "json" (default) or "pretty"
        output: "stdout" (default) or "stderr"
        show_token: print the raw token instead of a fingerprint (default false)

    Example configuration:
        sink:
          name: console
          options:
            format: pretty
            output: stderr
    """

    _name = "console"

    _VALID_FORMATS: frozenset[str] = frozenset({"json", "pretty"})
    _VALID_OUTPUTS: frozenset[str] = frozenset({"stdout", "stderr"})

    def __init__(self) -> None:
        self._format: Literal["json", "pretty"] = "json"
        self._output: Literal["stdout", "stderr"] = "stdout"
        self._show_token = False

    @property
    def name(self) -> str:
        return self._name

    def configure(self, options: dict[str, Any]) -> None:
        """Validate and apply options.

        Raises:
            SinkConfigurationError: If an option has the wrong type or value
        """
        format_value = options.get("format", "json")
        if not isinstance(format_value, str):
            raise SinkConfigurationError(self._name, f"'format' must be a string, got {type(format_value).__name__}")
        if not _is_valid_format(format_value):
            raise SinkConfigurationError(
                self._name,
                f"Invalid format '{format_value}'. Must be one of: {', '.join(sorted(self._VALID_FORMATS))}",
            )
        self._format = format_value

        output_value = options.get("output", "stdout")
        if not isinstance(output_value, str):
            raise SinkConfigurationError(self._name, f"'output' must be a string, got {type(output_value).__name__}")
        if not _is_valid_output(output_value):
            raise SinkConfigurationError(
                self._name,
                f"Invalid output '{output_value}'. Must be one of: {', '.join(sorted(self._VALID_OUTPUTS))}",
            )
        self._output = output_value

        show_token = options.get("show_token", False)
        if not isinstance(show_token, bool):
            raise SinkConfigurationError(self._name, f"'show_token' must be a boolean, got {type(show_token).__name__}")
        self._show_token = show_token

        logger.debug("console_sink_configured", format=self._format, output=self._output)

    def _resolve_stream(self) -> TextIO:
        # Resolved per call so a replaced sys.stdout (capsys, redirect_stdout) is honored
        return sys.stdout if self._output == "stdout" else sys.stderr

    def _emit(self, call: SinkCall, fields: dict[str, Any]) -> None:
        if "token" in fields and not self._show_token:
            fields = {**fields, "token": token_fingerprint(fields["token"])}

        if self._format == "json":
            line = json.dumps({"call": call.value, **fields})
        else:
            line = self._format_pretty(call, fields)
        print(line, file=self._resolve_stream())

    def _format_pretty(self, call: SinkCall, fields: dict[str, Any]) -> str:
        """Format: ``call: key=value, ...`` with keys sorted; None values omitted."""
        details = ", ".join(f"{key}={fields[key]}" for key in sorted(fields) if fields[key] is not None)
        if details:
            return f"{call.value}: {details}"
        return call.value

    def close(self) -> None:
        """Flush the stream. The console sink does not own stdout/stderr."""
        try:
            self._resolve_stream().flush()
        except Exception as e:
            logger.warning("console_sink_flush_failed", error=str(e))
