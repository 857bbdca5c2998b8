"""
Session orchestration: spawning, movement, gravity, scoring, and hold.

The controller is split in two layers:

  - Pure transition functions (``try_move``, ``try_rotate``, ``hard_drop``,
    ``gravity_step``, ``hold``) that take immutable values and return new
    ones. They never mutate a Board that is already part of a GameState.
  - ``GameSession``, a small facade that owns the current GameState,
    serializes commands and gravity ticks behind a lock, and notifies
    listeners about locks, line clears, score changes, and game over.

Gravity timing is not handled here: a host driver calls ``tick()`` every
``tick_interval_ms`` milliseconds.
"""

from __future__ import annotations

import enum
import random
import threading
from dataclasses import dataclass, replace
from typing import Callable

import numpy as np

from fallingblocks.game.board import Board
from fallingblocks.game.geometry import (
    Piece,
    Point,
    Shape,
    piece_cells,
    preview_cells,
)


class Command(enum.IntEnum):
    """Discrete player commands. Fire-and-forget, no payload."""
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    SOFT_DROP = 2
    ROTATE = 3
    HARD_DROP = 4
    HOLD = 5
    RESET = 6


class GameEvent(enum.Enum):
    """Notifications emitted by GameSession after a transition."""
    PIECE_LOCKED = "piece_locked"
    LINES_CLEARED = "lines_cleared"
    SCORE_CHANGED = "score_changed"
    GAME_OVER = "game_over"
    RESET = "reset"


# Points per line clear, indexed by lines cleared at once (0-4),
# multiplied by the level in effect when the piece locked.
LINE_SCORES: tuple[int, ...] = (0, 100, 300, 500, 800)

LINES_PER_LEVEL = 10

# Gravity delay curve (milliseconds)
BASE_TICK_MS = 600
TICK_STEP_MS = 40
MIN_TICK_MS = 120


def level_for_lines(lines: int) -> int:
    """Level reached after clearing ``lines`` rows in total (starts at 1)."""
    return 1 + lines // LINES_PER_LEVEL


def line_clear_score(cleared: int, level: int) -> int:
    """Points earned for clearing ``cleared`` rows at ``level``."""
    if cleared <= 0:
        return 0
    return LINE_SCORES[min(cleared, len(LINE_SCORES) - 1)] * level


def tick_interval_ms(level: int) -> int:
    """Delay between gravity ticks at ``level``."""
    return max(MIN_TICK_MS, BASE_TICK_MS - (level - 1) * TICK_STEP_MS)


# =============================================================================
# Pure piece operations
# =============================================================================

def spawn_origin(board: Board) -> Point:
    return Point(board.width // 2, 0)


def spawn_piece(board: Board, rng: random.Random) -> Piece:
    """Pick a shape uniformly at random and place it at the spawn cell.

    No collision check is made; a spawn that overlaps the stack is how
    game over is detected by the caller.
    """
    shape = rng.choice(list(Shape))
    return Piece(shape, spawn_origin(board), 0)


def try_move(board: Board, piece: Piece, dx: int, dy: int) -> Piece | None:
    """Return ``piece`` shifted by (dx, dy), or None if that collides."""
    moved = piece.shifted(dx, dy)
    if board.collides(piece_cells(moved)):
        return None
    return moved


def try_rotate(board: Board, piece: Piece) -> Piece | None:
    """Return ``piece`` turned one quarter, or None if that collides.

    Rotation happens in place around the origin; no kick offsets are tried.
    """
    rotated = piece.rotated()
    if board.collides(piece_cells(rotated)):
        return None
    return rotated


def hard_drop(board: Board, piece: Piece) -> Piece:
    """Return ``piece`` moved down to the lowest row it can reach.

    The piece is not locked.
    """
    while True:
        below = try_move(board, piece, 0, 1)
        if below is None:
            return piece
        piece = below


# =============================================================================
# Game state and transitions
# =============================================================================

@dataclass(frozen=True)
class GameState:
    """Everything a session needs between two transitions.

    Attributes:
        board: Settled terrain. Treated as read-only once in a state.
        current: The falling piece.
        next: The piece promoted on the next lock.
        held: The piece set aside with hold, or None.
        can_hold: Whether hold is still available for the current piece.
        score: Points scored so far.
        lines: Total rows cleared.
        game_over: Set once a promoted piece overlaps the stack.
        last_cleared: Rows cleared by the most recent lock.
        pieces_locked: Number of pieces locked into the board.
    """
    board: Board
    current: Piece
    next: Piece
    held: Piece | None = None
    can_hold: bool = True
    score: int = 0
    lines: int = 0
    game_over: bool = False
    last_cleared: int = 0
    pieces_locked: int = 0

    @property
    def level(self) -> int:
        return level_for_lines(self.lines)


def new_game(width: int = 10, height: int = 20, rng: random.Random | None = None) -> GameState:
    """Build a fresh state: empty board plus the first current and next pieces.

    Raises:
        ConfigurationError: If the board dimensions are invalid.
    """
    if rng is None:
        rng = random.Random()
    board = Board(width, height)
    current = spawn_piece(board, rng)
    upcoming = spawn_piece(board, rng)
    return GameState(
        board=board,
        current=current,
        next=upcoming,
        game_over=board.collides(piece_cells(current)),
    )


def gravity_step(state: GameState, rng: random.Random) -> GameState:
    """Advance the game by one gravity tick.

    If the current piece can fall one row it does. Otherwise it is locked
    into a copy of the board, full rows are cleared and scored at the
    current level, ``next`` becomes ``current`` and a new ``next`` is drawn.
    If the promoted piece already overlaps the stack the game is over.

    A finished game is returned unchanged.
    """
    if state.game_over:
        return state

    moved = try_move(state.board, state.current, 0, 1)
    if moved is not None:
        return replace(state, current=moved, last_cleared=0)

    board = state.board.copy()
    board.lock(state.current)
    cleared = board.clear_lines()
    lines = state.lines + cleared
    current = state.next
    return GameState(
        board=board,
        current=current,
        next=spawn_piece(board, rng),
        held=state.held,
        can_hold=True,
        score=state.score + line_clear_score(cleared, state.level),
        lines=lines,
        game_over=board.collides(piece_cells(current)),
        last_cleared=cleared,
        pieces_locked=state.pieces_locked + 1,
    )


def hold(state: GameState, rng: random.Random) -> GameState:
    """Set the current piece aside, at most once per locked piece.

    With an empty hold slot the current piece is stored, ``next`` is
    promoted and a new ``next`` is drawn. With a held piece the two are
    swapped and ``next`` is left alone. Both pieces are moved back to the
    spawn cell in rotation 0. The swapped-in piece is not collision checked.
    """
    if state.game_over or not state.can_hold:
        return state

    origin = spawn_origin(state.board)
    stashed = state.current.at(origin)
    if state.held is None:
        return replace(
            state,
            current=state.next.at(origin),
            next=spawn_piece(state.board, rng),
            held=stashed,
            can_hold=False,
        )
    return replace(
        state,
        current=state.held.at(origin),
        held=stashed,
        can_hold=False,
    )


# =============================================================================
# Render snapshot
# =============================================================================

@dataclass(frozen=True)
class RenderSnapshot:
    """Read-only view of a session for a render sink.

    Attributes:
        grid: Copy of the board grid (height x width, int8).
        active_shape: Shape of the falling piece.
        active_cells: Absolute cells of the falling piece.
        ghost_cells: Cells the falling piece would occupy after a hard drop.
        next_shape: Shape of the next piece.
        next_cells: Preview offsets of the next piece (min x/y = 0).
        held_shape: Shape of the held piece, or None.
        held_cells: Preview offsets of the held piece (empty if none).
        score, lines, level, can_hold, game_over: Session counters.
    """
    grid: np.ndarray
    active_shape: Shape
    active_cells: tuple[Point, ...]
    ghost_cells: tuple[Point, ...]
    next_shape: Shape
    next_cells: tuple[Point, ...]
    held_shape: Shape | None
    held_cells: tuple[Point, ...]
    score: int
    lines: int
    level: int
    can_hold: bool
    game_over: bool


def snapshot(state: GameState) -> RenderSnapshot:
    held = state.held
    return RenderSnapshot(
        grid=state.board.get_grid(),
        active_shape=state.current.shape,
        active_cells=tuple(piece_cells(state.current)),
        ghost_cells=tuple(piece_cells(hard_drop(state.board, state.current))),
        next_shape=state.next.shape,
        next_cells=tuple(preview_cells(state.next.shape)),
        held_shape=held.shape if held is not None else None,
        held_cells=tuple(preview_cells(held.shape)) if held is not None else (),
        score=state.score,
        lines=state.lines,
        level=state.level,
        can_hold=state.can_hold,
        game_over=state.game_over,
    )


# =============================================================================
# Session facade
# =============================================================================

Listener = Callable[[GameEvent, GameState], None]


class GameSession:
    """Mutable handle on a game, safe to drive from a tick thread and an
    input thread at the same time.

    Every transition computes a new GameState under ``self._lock`` and swaps
    it in as a whole, so readers never see a half-applied lock or clear.
    Listeners are called after the lock is released.

    Attributes:
        width: Board width used for new games.
        height: Board height used for new games.
        lock_on_hard_drop: If True, a hard drop locks immediately instead of
            waiting for the next gravity tick.
    """

    def __init__(
        self,
        width: int = 10,
        height: int = 20,
        rng: random.Random | None = None,
        lock_on_hard_drop: bool = False,
    ) -> None:
        """Start a new game.

        Args:
            width: Board width in columns.
            height: Board height in rows.
            rng: Random source for piece selection (seed it for replays).
            lock_on_hard_drop: Lock right after a hard drop.

        Raises:
            ConfigurationError: If the board dimensions are invalid.
        """
        self.width = width
        self.height = height
        self.lock_on_hard_drop = lock_on_hard_drop
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []
        self._state = new_game(width, height, self._rng)

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def level(self) -> int:
        return self._state.level

    @property
    def game_over(self) -> bool:
        return self._state.game_over

    @property
    def tick_interval_ms(self) -> int:
        """Delay the host should wait before the next ``tick()``."""
        return tick_interval_ms(self._state.level)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def snapshot(self) -> RenderSnapshot:
        return snapshot(self._state)

    def tick(self) -> bool:
        """Apply one gravity step.

        Returns:
            True if the state changed (False once the game is over).
        """
        with self._lock:
            before = self._state
            self._state = gravity_step(before, self._rng)
            after = self._state
        self._notify(before, after)
        return after is not before

    def reset(self) -> None:
        """Throw away the board and all counters and start a new game."""
        with self._lock:
            self._state = new_game(self.width, self.height, self._rng)
            after = self._state
        for listener in list(self._listeners):
            listener(GameEvent.RESET, after)

    def apply(self, command: Command) -> bool:
        """Execute a player command.

        Rejected moves and rotations leave the state untouched. After game
        over only ``Command.RESET`` has an effect.

        Args:
            command: The command to run.

        Returns:
            True if the state changed.
        """
        if command == Command.RESET:
            self.reset()
            return True

        with self._lock:
            before = self._state
            after = self._run(before, command)
            self._state = after
        self._notify(before, after)
        return after is not before

    def _run(self, state: GameState, command: Command) -> GameState:
        if state.game_over:
            return state

        board = state.board
        if command == Command.MOVE_LEFT:
            moved = try_move(board, state.current, -1, 0)
        elif command == Command.MOVE_RIGHT:
            moved = try_move(board, state.current, 1, 0)
        elif command == Command.SOFT_DROP:
            moved = try_move(board, state.current, 0, 1)
        elif command == Command.ROTATE:
            moved = try_rotate(board, state.current)
        elif command == Command.HARD_DROP:
            landed = hard_drop(board, state.current)
            dropped = state if landed == state.current else replace(state, current=landed)
            if self.lock_on_hard_drop:
                return gravity_step(dropped, self._rng)
            return dropped
        elif command == Command.HOLD:
            return hold(state, self._rng)
        else:
            raise ValueError(f"Unknown command: {command!r}")

        if moved is None:
            return state
        return replace(state, current=moved)

    def _notify(self, before: GameState, after: GameState) -> None:
        if after is before or not self._listeners:
            return

        events = []
        if after.pieces_locked > before.pieces_locked:
            events.append(GameEvent.PIECE_LOCKED)
            if after.last_cleared > 0:
                events.append(GameEvent.LINES_CLEARED)
        if after.score != before.score:
            events.append(GameEvent.SCORE_CHANGED)
        if after.game_over and not before.game_over:
            events.append(GameEvent.GAME_OVER)

        for event in events:
            for listener in list(self._listeners):
                listener(event, after)
