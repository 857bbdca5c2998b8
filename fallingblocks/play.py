"""
Manual play and headless demo drivers.

Both drivers act as the gravity tick host: the game core never schedules
time, so the driver calls ``GameSession.tick()`` every
``session.tick_interval_ms`` milliseconds (game clock) and forwards player
commands in between.

  - play_manual: Human plays with keyboard controls in a pygame window.
  - play_demo: Random commands, no window; prints a summary per game.
"""

from __future__ import annotations

import random
from typing import Any

try:
    import pygame
except ImportError:
    pygame = None  # type: ignore[assignment]

from fallingblocks.game.session import Command, GameSession, GameState
from fallingblocks.scores import BestScoreStore


# ── Keyboard mapping for manual play ─────────────────────────────────────
# Arrow keys for movement, Up/X to rotate, Space for hard drop, C for hold
KEY_MAP: dict[int, Command] = {}
if pygame is not None:
    KEY_MAP = {
        pygame.K_LEFT: Command.MOVE_LEFT,
        pygame.K_RIGHT: Command.MOVE_RIGHT,
        pygame.K_DOWN: Command.SOFT_DROP,
        pygame.K_UP: Command.ROTATE,
        pygame.K_x: Command.ROTATE,
        pygame.K_SPACE: Command.HARD_DROP,
        pygame.K_c: Command.HOLD,
        pygame.K_r: Command.RESET,
    }

# Commands the demo driver picks from, weighted toward sideways motion
DEMO_COMMANDS: list[Command] = [
    Command.MOVE_LEFT,
    Command.MOVE_LEFT,
    Command.MOVE_RIGHT,
    Command.MOVE_RIGHT,
    Command.ROTATE,
    Command.SOFT_DROP,
    Command.HARD_DROP,
    Command.HOLD,
]


def build_session(config: dict[str, Any], seed: int | None = None) -> GameSession:
    """Create a GameSession from config values.

    Args:
        config: Config dict loaded from settings.yaml.
        seed: Overrides ``config["seed"]`` when given.

    Raises:
        ConfigurationError: If the configured board size is invalid.
    """
    if seed is None:
        seed = config.get("seed")
    return GameSession(
        width=config.get("board_width", 10),
        height=config.get("board_height", 20),
        rng=random.Random(seed),
        lock_on_hard_drop=config.get("lock_on_hard_drop", False),
    )


def build_score_store(config: dict[str, Any]) -> BestScoreStore | None:
    """Return the best-score store configured in ``config``, if any."""
    path = config.get("best_score_path")
    if not path:
        return None
    return BestScoreStore(path, namespace=config.get("score_namespace", "scores"))


def play_manual(config: dict[str, Any], seed: int | None = None) -> None:
    """Run the game in manual (human) play mode.

    The player uses keyboard controls:
      - Left/Right arrow: move piece
      - Down arrow: soft drop
      - Up arrow / X: rotate
      - Space: hard drop
      - C: hold piece
      - R: restart
      - Escape / close window: quit

    Args:
        config: Config dict loaded from settings.yaml.
        seed: Optional seed for the piece sequence.
    """
    if pygame is None:
        raise ImportError("pygame is required for play mode. Install it: pip install pygame")

    from fallingblocks.renderer import GameRenderer

    session = build_session(config, seed)
    store = build_score_store(config)
    if store is not None:
        session.add_listener(store.listener)

    fps = config.get("fps", 60)
    renderer = GameRenderer(session.width, session.height, cell_size=config.get("cell_size", 30))
    renderer.render(session.snapshot(), best=store.best if store else 0)
    clock = pygame.time.Clock()

    running = True
    elapsed_ms = 0
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                break
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                    break
                if event.key in KEY_MAP:
                    command = KEY_MAP[event.key]
                    session.apply(command)
                    if command == Command.RESET:
                        elapsed_ms = 0

        if not running:
            break

        # Gravity tick at the level-dependent interval
        elapsed_ms += clock.tick(fps)
        if not session.game_over and elapsed_ms >= session.tick_interval_ms:
            elapsed_ms = 0
            session.tick()

        renderer.render(session.snapshot(), best=store.best if store else 0)

    state = session.state
    print(f"Score: {state.score} | Lines: {state.lines} | Level: {state.level}")
    renderer.close()


def play_demo(
    config: dict[str, Any],
    games: int = 1,
    seed: int | None = None,
    commands_per_tick: int = 3,
    max_ticks: int = 100_000,
) -> list[GameState]:
    """Play ``games`` games with random commands and no window.

    Each gravity tick is preceded by ``commands_per_tick`` random commands.
    A game ends on game over or after ``max_ticks`` ticks.

    Args:
        config: Config dict loaded from settings.yaml.
        games: Number of games to play.
        seed: Seed for both the piece sequence and the command choice.
        commands_per_tick: Random commands issued between two ticks.
        max_ticks: Safety cap on ticks per game.

    Returns:
        The final state of every game played.
    """
    session = build_session(config, seed)
    store = build_score_store(config)
    if store is not None:
        session.add_listener(store.listener)
    chooser = random.Random(seed)

    results = []
    for game_num in range(1, games + 1):
        if game_num > 1:
            session.reset()
        ticks = 0
        while not session.game_over and ticks < max_ticks:
            for _ in range(commands_per_tick):
                session.apply(chooser.choice(DEMO_COMMANDS))
            session.tick()
            ticks += 1

        state = session.state
        results.append(state)
        print(
            f"Game {game_num}/{games}"
            + f" | Score: {state.score} | Lines: {state.lines} | Level: {state.level}"
            + f" | Pieces: {state.pieces_locked} | Ticks: {ticks}"
            + (f" | Best: {store.best}" if store else "")
        )
    return results
