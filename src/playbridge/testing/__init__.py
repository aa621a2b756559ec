# src/playbridge/testing/__init__.py
"""Test doubles for hosts integrating the telemetry bridge.

- RecordingSink: AnalyticsSink that records every call in order
- FakePlayer: PlayerEventBus with a destroy() switch that makes off() raise
"""

from playbridge.testing.player import FakePlayer, PlayerDestroyedError
from playbridge.testing.sink import RecordedCall, RecordingSink

__all__ = [
    "FakePlayer",
    "PlayerDestroyedError",
    "RecordedCall",
    "RecordingSink",
]
