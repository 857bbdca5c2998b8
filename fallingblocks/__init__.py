"""Falling blocks: a deterministic tetromino game core with a pygame host."""

__version__ = "0.1.0"
