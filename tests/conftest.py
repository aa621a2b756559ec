# tests/conftest.py
"""Shared test fixtures.

Fixtures build the bridge from the same pieces a host would use: a
RecordingSink in place of the collector, FakePlayer instances in place of
media players, and static token/identity providers.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/telemetry/
"""

import logging
import os

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings
from structlog.stdlib import ProcessorFormatter

from playbridge.contracts.session import ContentItem
from playbridge.telemetry.bridge import TelemetryBridge
from playbridge.telemetry.providers import StaticIdentityProvider, StaticTokenProvider
from playbridge.testing import FakePlayer, RecordingSink

ORIGIN = "watch.example.com"

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_logging():
    """Keep structlog and root logger configuration from leaking between tests."""
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def tokens() -> StaticTokenProvider:
    return StaticTokenProvider("tok")


@pytest.fixture
def identity() -> StaticIdentityProvider:
    return StaticIdentityProvider(42)


@pytest.fixture
def origin() -> str:
    return ORIGIN


@pytest.fixture
def bridge(sink: RecordingSink, tokens: StaticTokenProvider, identity: StaticIdentityProvider) -> TelemetryBridge:
    return TelemetryBridge(sink, origin=ORIGIN, token_provider=tokens, identity_provider=identity)


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer(duration=5400.0, name="p1")


@pytest.fixture
def movie() -> ContentItem:
    return ContentItem(item_id="m1", title="Movie")


@pytest.fixture
def sequel() -> ContentItem:
    return ContentItem(item_id="m2", title="Sequel")
