import random
import threading
import unittest

import numpy as np

from fallingblocks.game.board import Board
from fallingblocks.game.errors import ConfigurationError
from fallingblocks.game.geometry import Piece, Point, Shape, piece_cells
from fallingblocks.game.session import (
    Command,
    GameEvent,
    GameSession,
    GameState,
    level_for_lines,
    line_clear_score,
)


SPAWN = Point(5, 0)


def make_session(**kwargs) -> GameSession:
    return GameSession(rng=random.Random(1234), **kwargs)


def install_state(session: GameSession, state: GameState) -> None:
    session._state = state


class RecordingListener:
    def __init__(self):
        self.events = []

    def __call__(self, event, state):
        self.events.append(event)


class GameSessionTests(unittest.TestCase):
    def test_invalid_board_fails_fast(self):
        with self.assertRaises(ConfigurationError):
            GameSession(width=0, height=20)

    def test_initial_state(self):
        session = make_session()
        self.assertEqual(session.score, 0)
        self.assertEqual(session.level, 1)
        self.assertFalse(session.game_over)
        self.assertEqual(session.tick_interval_ms, 600)
        self.assertEqual(session.state.current.origin, SPAWN)

    def test_move_left_and_soft_drop(self):
        session = make_session()
        self.assertTrue(session.apply(Command.MOVE_LEFT))
        self.assertEqual(session.state.current.origin, Point(4, 0))
        self.assertTrue(session.apply(Command.SOFT_DROP))
        self.assertEqual(session.state.current.origin, Point(4, 1))

    def test_blocked_move_leaves_state_untouched(self):
        session = make_session()
        for _ in range(10):
            session.apply(Command.MOVE_LEFT)
        before = session.state
        self.assertFalse(session.apply(Command.MOVE_LEFT))
        self.assertIs(session.state, before)

    def test_rejected_rotation_is_silent(self):
        session = make_session()
        install_state(session, GameState(Board(), Piece(Shape.T, SPAWN), Piece(Shape.O, SPAWN)))
        before = session.state
        self.assertFalse(session.apply(Command.ROTATE))
        self.assertIs(session.state, before)

    def test_hard_drop_waits_for_tick_to_lock(self):
        session = make_session()
        install_state(session, GameState(Board(), Piece(Shape.I, SPAWN), Piece(Shape.O, SPAWN)))
        session.apply(Command.HARD_DROP)
        self.assertEqual(session.state.current.origin, Point(5, 19))
        self.assertEqual(session.state.pieces_locked, 0)
        self.assertFalse(session.state.board.grid.any())

        session.tick()
        self.assertEqual(session.state.pieces_locked, 1)
        self.assertEqual(session.state.board.cell(3, 19), int(Shape.I) + 1)
        self.assertEqual(session.state.current, Piece(Shape.O, SPAWN))

    def test_hard_drop_can_lock_immediately(self):
        session = make_session(lock_on_hard_drop=True)
        session.apply(Command.HARD_DROP)
        self.assertEqual(session.state.pieces_locked, 1)

    def test_hold_twice_swaps_once(self):
        session = make_session()
        first = session.state.current.shape
        self.assertTrue(session.apply(Command.HOLD))
        held = session.state
        self.assertFalse(session.apply(Command.HOLD))
        self.assertIs(session.state, held)
        self.assertEqual(held.held.shape, first)

    def test_line_clear_events_and_score(self):
        session = make_session()
        board = Board()
        board.grid[19, :9] = 1
        install_state(
            session,
            GameState(board, Piece(Shape.I, Point(9, 18), 1), Piece(Shape.O, SPAWN)),
        )
        listener = RecordingListener()
        session.add_listener(listener)

        session.tick()

        self.assertEqual(
            listener.events,
            [GameEvent.PIECE_LOCKED, GameEvent.LINES_CLEARED, GameEvent.SCORE_CHANGED],
        )
        self.assertEqual(session.score, 100)

    def test_falling_tick_emits_nothing(self):
        session = make_session()
        listener = RecordingListener()
        session.add_listener(listener)
        self.assertTrue(session.tick())
        self.assertEqual(listener.events, [])

    def test_game_over_and_reset(self):
        session = make_session()
        board = Board()
        board.grid[0:2, 1:] = 2
        install_state(
            session,
            GameState(board, Piece(Shape.I, Point(0, 18), 1), Piece(Shape.O, SPAWN), score=300),
        )
        listener = RecordingListener()
        session.add_listener(listener)

        session.tick()
        self.assertTrue(session.game_over)
        self.assertEqual(listener.events, [GameEvent.PIECE_LOCKED, GameEvent.GAME_OVER])

        frozen = session.state
        for command in (Command.MOVE_LEFT, Command.ROTATE, Command.HARD_DROP, Command.HOLD):
            self.assertFalse(session.apply(command))
        self.assertFalse(session.tick())
        self.assertIs(session.state, frozen)

        self.assertTrue(session.apply(Command.RESET))
        self.assertFalse(session.game_over)
        self.assertEqual(session.score, 0)
        self.assertIsNot(session.state.board, board)
        self.assertFalse(session.state.board.grid.any())
        self.assertEqual(listener.events[-1], GameEvent.RESET)

    def test_remove_listener(self):
        session = make_session(lock_on_hard_drop=True)
        listener = RecordingListener()
        session.add_listener(listener)
        session.remove_listener(listener)
        session.apply(Command.HARD_DROP)
        self.assertEqual(listener.events, [])


class SnapshotTests(unittest.TestCase):
    def test_snapshot_contents(self):
        session = make_session()
        install_state(session, GameState(Board(), Piece(Shape.I, SPAWN), Piece(Shape.L, SPAWN)))
        snap = session.snapshot()

        self.assertEqual(snap.active_shape, Shape.I)
        self.assertEqual(snap.active_cells, tuple(piece_cells(Piece(Shape.I, SPAWN))))
        self.assertEqual({p.y for p in snap.ghost_cells}, {19})
        self.assertEqual(snap.next_shape, Shape.L)
        self.assertEqual(min(p.x for p in snap.next_cells), 0)
        self.assertIsNone(snap.held_shape)
        self.assertEqual(snap.held_cells, ())
        self.assertEqual((snap.score, snap.lines, snap.level), (0, 0, 1))
        self.assertTrue(snap.can_hold)
        self.assertFalse(snap.game_over)

    def test_snapshot_grid_is_a_copy(self):
        session = make_session()
        snap = session.snapshot()
        snap.grid[0, 0] = 7
        self.assertEqual(session.state.board.cell(0, 0), 0)

    def test_snapshot_after_hold(self):
        session = make_session()
        shape = session.state.current.shape
        session.apply(Command.HOLD)
        snap = session.snapshot()
        self.assertEqual(snap.held_shape, shape)
        self.assertEqual(len(snap.held_cells), 4)
        self.assertFalse(snap.can_hold)


class ConcurrencyTests(unittest.TestCase):
    def test_ticks_and_commands_from_two_threads(self):
        # Only ticks lock pieces here (no RESET, hard drop waits for a tick),
        # so the ticker sees every lock and can rebuild the score.
        session = make_session()
        commands = list(Command)
        commands.remove(Command.RESET)
        cleared_per_lock = []

        def ticker():
            locked = 0
            for _ in range(400):
                session.tick()
                state = session.state
                if state.pieces_locked > locked:
                    locked = state.pieces_locked
                    cleared_per_lock.append(state.last_cleared)

        def player():
            rng = random.Random(9)
            for _ in range(400):
                session.apply(rng.choice(commands))

        threads = [threading.Thread(target=ticker), threading.Thread(target=player)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        state = session.state
        values = set(np.unique(state.board.grid).tolist())
        self.assertTrue(values <= set(range(8)))
        self.assertGreaterEqual(state.pieces_locked, 1)
        self.assertEqual(len(cleared_per_lock), state.pieces_locked)

        lines = 0
        score = 0
        for cleared in cleared_per_lock:
            score += line_clear_score(cleared, level_for_lines(lines))
            lines += cleared
        self.assertEqual(state.lines, lines)
        self.assertEqual(state.score, score)


if __name__ == "__main__":
    unittest.main()
