# src/playbridge/core/__init__.py
"""Core infrastructure: configuration, logging and the player event bus."""
