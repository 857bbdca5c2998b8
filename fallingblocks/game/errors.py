"""Exceptions raised by the game core."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a board or session is built from unusable settings."""
