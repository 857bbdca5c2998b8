"""
Board logic for a 10x20 falling-blocks grid.

The board is a 2D numpy array (height x width) of int8 values:
  - 0 = empty cell
  - 1-7 = shape ordinal + 1 of the piece locked there (used for coloring)

Row 0 is the top of the well; pieces spawn there and fall toward
row height-1.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from fallingblocks.game.errors import ConfigurationError
from fallingblocks.game.geometry import Piece, Point, piece_cells


class Board:
    """Settled terrain with collision detection and line clearing.

    Attributes:
        width: Number of columns (default 10).
        height: Number of rows (default 20).
        grid: 2D numpy array of shape (height, width), dtype int8.
    """

    def __init__(self, width: int = 10, height: int = 20) -> None:
        """Initialize an empty board.

        Args:
            width: Number of columns.
            height: Number of rows.

        Raises:
            ConfigurationError: If either dimension is not a positive int.
        """
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ConfigurationError(f"Board {name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigurationError(f"Board {name} must be positive, got {value}")
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def inside(self, p: Point) -> bool:
        """Return True if ``p`` lies within the board boundaries."""
        return 0 <= p.x < self.width and 0 <= p.y < self.height

    def collides(self, cells: Iterable[Point]) -> bool:
        """Check whether any of ``cells`` is off the board or already filled.

        Args:
            cells: Absolute board cells, usually from ``piece_cells``.

        Returns:
            True if at least one cell is outside the board or overlaps a
            locked cell, False otherwise.
        """
        for p in cells:
            if not self.inside(p):
                return True
            if self.grid[p.y, p.x] != 0:
                return True
        return False

    def lock(self, piece: Piece) -> None:
        """Lock a piece onto the board.

        Writes the piece's shape ordinal + 1 into the grid at each of its
        cells. Does NOT check validity first; caller must ensure the piece
        does not collide.
        """
        value = int(piece.shape) + 1
        for p in piece_cells(piece):
            self.grid[p.y, p.x] = value

    def clear_lines(self) -> int:
        """Remove all fully filled rows and shift everything above them down.

        Returns:
            The number of lines cleared.
        """
        full = np.all(self.grid != 0, axis=1)
        lines_cleared = int(full.sum())
        if lines_cleared == 0:
            return 0

        # Rebuild the grid: fresh empty rows on top, survivors below in order
        remaining = self.grid[~full]
        empty_rows = np.zeros((lines_cleared, self.width), dtype=np.int8)
        self.grid = np.vstack([empty_rows, remaining])
        return lines_cleared

    def cell(self, x: int, y: int) -> int:
        """Return the value stored at column ``x``, row ``y``."""
        return int(self.grid[y, x])

    def get_grid(self) -> np.ndarray:
        """Return a copy of the board grid.

        Returns:
            A numpy array of shape (height, width), dtype int8.
        """
        return self.grid.copy()

    def copy(self) -> Board:
        """Return an independent board with the same terrain."""
        clone = Board(self.width, self.height)
        clone.grid = self.grid.copy()
        return clone
