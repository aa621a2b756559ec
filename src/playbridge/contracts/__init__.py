# src/playbridge/contracts/__init__.py
"""Shared contracts: data model and event vocabulary.

These types cross the boundary between the host application and the
telemetry bridge. Keep them free of behaviour.
"""

from playbridge.contracts.events import PlayerEvent, SeekParams, SinkCall, TimeParams
from playbridge.contracts.session import ContentItem, SessionInputs

__all__ = [
    "ContentItem",
    "PlayerEvent",
    "SeekParams",
    "SessionInputs",
    "SinkCall",
    "TimeParams",
]
