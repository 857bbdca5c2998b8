"""Game logic: geometry, board, and session orchestrator."""

from fallingblocks.game.errors import ConfigurationError
from fallingblocks.game.geometry import (
    Point,
    Shape,
    Piece,
    shape_cells,
    rotate,
    piece_cells,
    preview_cells,
    color_index,
)
from fallingblocks.game.board import Board
from fallingblocks.game.session import (
    Command,
    GameEvent,
    GameState,
    GameSession,
    RenderSnapshot,
    spawn_piece,
    try_move,
    try_rotate,
    hard_drop,
    gravity_step,
    hold,
    new_game,
    level_for_lines,
    tick_interval_ms,
)

__all__ = [
    "ConfigurationError",
    "Point",
    "Shape",
    "Piece",
    "shape_cells",
    "rotate",
    "piece_cells",
    "preview_cells",
    "color_index",
    "Board",
    "Command",
    "GameEvent",
    "GameState",
    "GameSession",
    "RenderSnapshot",
    "spawn_piece",
    "try_move",
    "try_rotate",
    "hard_drop",
    "gravity_step",
    "hold",
    "new_game",
    "level_for_lines",
    "tick_interval_ms",
]
