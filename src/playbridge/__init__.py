# src/playbridge/__init__.py
"""
Playbridge: playback telemetry bridge between media players and analytics collectors.

Attaches to a live player instance, forwards its lifecycle and progress
events to an analytics sink, and guarantees a single flush per watch session.
"""

__version__ = "0.1.0"
