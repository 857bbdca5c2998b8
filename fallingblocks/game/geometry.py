"""
Tetromino shape table and rotation geometry.

Each shape is stored as 4 (x, y) offsets around a pivot at (0, 0), at
rotation 0. Absolute cells are derived on demand by rotating the offsets
and translating them by the piece origin.

Coordinate convention:
  - x is the column and grows rightward.
  - y is the row; row 0 is the top and y grows downward.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import NamedTuple


class Point(NamedTuple):
    """Integer cell offset or absolute board coordinate."""
    x: int
    y: int


class Shape(enum.IntEnum):
    """The 7 tetromino variants. The ordinal + 1 is the locked cell value."""
    I = 0
    O = 1
    T = 2
    S = 3
    Z = 4
    J = 5
    L = 6


# =============================================================================
# Shape table (rotation 0)
# =============================================================================

SHAPE_CELLS: dict[Shape, tuple[Point, ...]] = {
    Shape.I: (Point(-2, 0), Point(-1, 0), Point(0, 0), Point(1, 0)),
    Shape.O: (Point(0, 0), Point(1, 0), Point(0, 1), Point(1, 1)),
    Shape.T: (Point(-1, 0), Point(0, 0), Point(1, 0), Point(0, 1)),
    Shape.S: (Point(0, 0), Point(1, 0), Point(-1, 1), Point(0, 1)),
    Shape.Z: (Point(-1, 0), Point(0, 0), Point(0, 1), Point(1, 1)),
    Shape.J: (Point(-1, 0), Point(-1, 1), Point(0, 0), Point(1, 0)),
    Shape.L: (Point(1, 1), Point(-1, 0), Point(0, 0), Point(1, 0)),
}

NUM_COLORS = len(Shape)


@dataclass(frozen=True)
class Piece:
    """A tetromino with a position and rotation state.

    Pieces are values: moving or rotating one builds a new Piece.

    Attributes:
        shape: Which tetromino this is.
        origin: Board cell the shape's (0, 0) offset maps to.
        rotation: Number of quarter turns applied (0-3).
    """
    shape: Shape
    origin: Point
    rotation: int = 0

    def shifted(self, dx: int, dy: int) -> Piece:
        return Piece(self.shape, Point(self.origin.x + dx, self.origin.y + dy), self.rotation)

    def rotated(self) -> Piece:
        return Piece(self.shape, self.origin, (self.rotation + 1) % 4)

    def at(self, origin: Point) -> Piece:
        """Return this shape placed at ``origin`` in its spawn rotation."""
        return Piece(self.shape, origin, 0)


def shape_cells(shape: Shape) -> tuple[Point, ...]:
    """Return the 4 offsets of ``shape`` at rotation 0."""
    return SHAPE_CELLS[shape]


def rotate(point: Point, r: int) -> Point:
    """Rotate ``point`` a quarter turn around (0, 0), ``r`` times.

    Each step maps (x, y) -> (-y, x). Negative ``r`` is folded into 0-3,
    so the result only depends on ``r`` modulo 4.

    Args:
        point: Offset to rotate.
        r: Number of quarter turns.

    Returns:
        The rotated offset.
    """
    x, y = point
    for _ in range(((r % 4) + 4) % 4):
        x, y = -y, x
    return Point(x, y)


def piece_cells(piece: Piece) -> list[Point]:
    """Return the absolute board cells covered by ``piece``."""
    ox, oy = piece.origin
    cells = []
    for offset in shape_cells(piece.shape):
        rx, ry = rotate(offset, piece.rotation)
        cells.append(Point(rx + ox, ry + oy))
    return cells


def preview_cells(shape: Shape) -> list[Point]:
    """Return the rotation-0 offsets of ``shape`` shifted so min x/y are 0.

    Used for the hold and next previews.
    """
    cells = shape_cells(shape)
    min_x = min(p.x for p in cells)
    min_y = min(p.y for p in cells)
    return [Point(p.x - min_x, p.y - min_y) for p in cells]


def color_index(value: int) -> int:
    """Map a non-zero cell value (1-7) to a palette slot (0-6)."""
    return (value - 1 + NUM_COLORS) % NUM_COLORS
