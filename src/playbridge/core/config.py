# src/playbridge/core/config.py
"""
Configuration schema and loading for playbridge.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class SinkSettings(BaseModel):
    """Analytics sink selection.

    Example YAML:
        sink:
          name: console
          options:
            format: pretty
            output: stderr
    """

    model_config = {"frozen": True}

    name: str = Field(default="console", min_length=1, description="Registered sink name")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Sink-specific options passed to configure()",
    )


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level",
    )
    json_output: bool = Field(default=False, description="Render log lines as JSON")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class BridgeSettings(BaseModel):
    """Top-level playbridge settings.

    Example YAML:
        enabled: true
        origin: watch.example.com
        analytics_token: ${ANALYTICS_TOKEN:-}
        sink:
          name: log
        logging:
          level: debug
    """

    model_config = {"frozen": True, "extra": "forbid"}

    enabled: bool = Field(default=True, description="Master switch for telemetry forwarding")
    origin: str = Field(
        default="localhost",
        min_length=1,
        description="Collector origin reported with every ready() call",
    )
    analytics_token: str | None = Field(
        default=None,
        description="Analytics token; absent or empty disables forwarding",
    )
    sink: SinkSettings = Field(default_factory=SinkSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("analytics_token", mode="before")
    @classmethod
    def empty_token_is_none(cls, v: Any) -> Any:
        """Treat an empty token as absent (``${VAR:-}`` expands to '')."""
        if v == "":
            return None
        return v


_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Unset variables without a default are left untouched so validation
    reports the literal pattern.
    """

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        default = match.group(2)
        if default is not None:
            return default
        return match.group(0)

    def expand(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(replacer, value)
        if isinstance(value, dict):
            return {k: expand(v) for k, v in value.items()}
        if isinstance(value, list):
            return [expand(item) for item in value]
        return value

    return {k: expand(v) for k, v in config.items()}


def _lowercase_keys(value: Any) -> Any:
    # Dynaconf upper-cases keys at every level of nesting
    if isinstance(value, dict):
        return {str(k).lower(): _lowercase_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lowercase_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> BridgeSettings:
    """Load settings from YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (PLAYBRIDGE_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Nested keys use a double underscore: PLAYBRIDGE_SINK__NAME=log.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated BridgeSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="PLAYBRIDGE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lowercase_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return BridgeSettings(**raw_config)
