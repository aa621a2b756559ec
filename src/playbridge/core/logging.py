# src/playbridge/core/logging.py
"""Structured logging configuration for playbridge.

Architecture:
    structlog and stdlib logging are configured together so that every
    record, whichever API produced it, goes through the same processor
    chain (ProcessorFormatter) and renders as JSON or console output.

    Logs go to stderr by default. stdout belongs to the console sink,
    which writes one telemetry line per forwarded call.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# Libraries that log plugin registration and settings resolution at DEBUG.
_NOISY_LOGGERS: tuple[str, ...] = (
    "pluggy",
    "dynaconf",
)

_VALID_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def _drop_formatter_bookkeeping(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Strip ``_record`` and ``_from_structlog`` added by ProcessorFormatter.

    Both keys are guaranteed by ProcessorFormatter.format(); a KeyError here
    means the integration is broken.
    """
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Args:
        json_output: Render JSON lines instead of the colored console format.
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        stream: Destination stream. Defaults to stderr.

    Raises:
        ValueError: If level is not a known level name.
    """
    level_name = level.upper()
    if level_name not in _VALID_LEVELS:
        raise ValueError(f"Unknown log level {level!r}. Must be one of: {', '.join(sorted(_VALID_LEVELS))}")
    log_level = getattr(logging, level_name)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        final_processors: list[Any] = [
            _drop_formatter_bookkeeping,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [
            _drop_formatter_bookkeeping,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests reconfigure logging; cached loggers would keep the old chain.
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=final_processors,
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    noisy_level = max(log_level, logging.WARNING)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger for a module, backed by the stdlib logger of the same name.

    Every playbridge module logs through this. Until the host calls
    configure_logging(), records go to stdlib's last-resort handler, which
    writes warnings and above to stderr and drops the rest, so nothing ever
    reaches stdout. After configure_logging() the same logger picks up the
    configured processor chain.

    Args:
        name: Logger name (typically __name__).
    """
    logger: structlog.stdlib.BoundLogger = structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    return logger
