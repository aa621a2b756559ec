# tests/unit/telemetry/test_providers.py
"""Tests for token and identity providers."""

from typing import Any

import pytest

from playbridge.core.config import BridgeSettings
from playbridge.telemetry.providers import (
    FeatureTokenProvider,
    IdentityProvider,
    StaticIdentityProvider,
    StaticTokenProvider,
    coerce_viewer_id,
)


class TestCoerceViewerId:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, None),
            (0, None),
            ("", None),
            ("0", 0),
            (42, 42),
            ("42", 42),
            (" 7 ", 7),
            (3.0, 3),
            (3.5, None),
            (True, None),
            ("abc", None),
            ("12a", None),
            ("1e3", None),
            ("4.5", None),
        ],
    )
    def test_coercion(self, raw: Any, expected: int | None) -> None:
        assert coerce_viewer_id(raw) == expected


class TestStaticTokenProvider:
    def test_empty_token_is_none(self) -> None:
        assert StaticTokenProvider("").analytics_token() is None

    def test_set_token(self) -> None:
        provider = StaticTokenProvider()
        provider.set_token("tok")
        assert provider.analytics_token() == "tok"
        provider.set_token("")
        assert provider.analytics_token() is None

    def test_from_settings(self) -> None:
        settings = BridgeSettings(analytics_token="tok")
        assert StaticTokenProvider.from_settings(settings).analytics_token() == "tok"

    def test_from_disabled_settings(self) -> None:
        settings = BridgeSettings(enabled=False, analytics_token="tok")
        assert StaticTokenProvider.from_settings(settings).analytics_token() is None

    def test_satisfies_protocol(self) -> None:
        assert isinstance(StaticTokenProvider("tok"), FeatureTokenProvider)


class TestStaticIdentityProvider:
    def test_anonymous_by_default(self) -> None:
        assert StaticIdentityProvider().viewer_id() is None

    def test_sign_in_and_out(self) -> None:
        provider = StaticIdentityProvider()
        provider.sign_in("1001")
        assert provider.viewer_id() == 1001
        provider.sign_out()
        assert provider.viewer_id() is None

    def test_satisfies_protocol(self) -> None:
        assert isinstance(StaticIdentityProvider(1), IdentityProvider)
