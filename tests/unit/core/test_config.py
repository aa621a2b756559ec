# tests/unit/core/test_config.py
"""Tests for settings schema and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from playbridge.core.config import BridgeSettings, LoggingSettings, SinkSettings, load_settings


class TestBridgeSettings:
    """Tests for the top-level settings schema."""

    def test_defaults(self) -> None:
        settings = BridgeSettings()

        assert settings.enabled is True
        assert settings.origin == "localhost"
        assert settings.analytics_token is None
        assert settings.sink == SinkSettings(name="console", options={})
        assert settings.logging.level == "INFO"

    def test_empty_token_is_none(self) -> None:
        assert BridgeSettings(analytics_token="").analytics_token is None

    def test_settings_are_frozen(self) -> None:
        settings = BridgeSettings()
        with pytest.raises(ValidationError):
            settings.origin = "other"  # type: ignore[misc]

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError, match="extra"):
            BridgeSettings(colector="typo")  # type: ignore[call-arg]

    def test_empty_origin_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BridgeSettings(origin="")


class TestLoggingSettings:
    def test_level_normalized(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"  # type: ignore[arg-type]

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(level="verbose")  # type: ignore[arg-type]


class TestLoadSettings:
    """Tests for loading settings from YAML with environment overrides."""

    def test_load_from_yaml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            """
origin: watch.example.com
analytics_token: tok
sink:
  name: log
  options:
    level: debug
logging:
  level: warning
  json_output: true
"""
        )

        settings = load_settings(config_file)

        assert settings.origin == "watch.example.com"
        assert settings.analytics_token == "tok"
        assert settings.sink.name == "log"
        assert settings.sink.options == {"level": "debug"}
        assert settings.logging.level == "WARNING"
        assert settings.logging.json_output is True

    def test_load_with_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("origin: watch.example.com\n")
        monkeypatch.setenv("PLAYBRIDGE_ORIGIN", "cdn.example.com")

        settings = load_settings(config_file)

        assert settings.origin == "cdn.example.com"

    def test_env_var_expansion_with_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("analytics_token: ${TEST_ANALYTICS_TOKEN:-}\norigin: ${TEST_COLLECTOR_ORIGIN:-fallback.example.com}\n")
        monkeypatch.delenv("TEST_ANALYTICS_TOKEN", raising=False)
        monkeypatch.delenv("TEST_COLLECTOR_ORIGIN", raising=False)

        settings = load_settings(config_file)

        assert settings.analytics_token is None
        assert settings.origin == "fallback.example.com"

    def test_env_var_expansion_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("analytics_token: ${TEST_ANALYTICS_TOKEN:-}\n")
        monkeypatch.setenv("TEST_ANALYTICS_TOKEN", "secret")

        assert load_settings(config_file).analytics_token == "secret"

    def test_load_validates_schema(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("logging:\n  level: chatty\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_load_rejects_unknown_key(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("collector_url: http://example.com\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_load_missing_file_raises_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nonexistent.yaml")
