"""
Best-score persistence.

Scores are kept in a small YAML mapping of namespace -> best score, so
several configurations (or players) can share one file:

    scores: 4200
    wide_board: 1300
"""

from __future__ import annotations

import pathlib
import threading
from typing import Any

import yaml

from fallingblocks.game.errors import ConfigurationError
from fallingblocks.game.session import GameEvent, GameState


class BestScoreStore:
    """Best score for one namespace, stored in a YAML file.

    ``submit`` may be called from the tick thread and the input thread at
    once, so reads and rewrites of the file are serialized.

    Attributes:
        path: Location of the YAML file (created on first write).
        namespace: Key the best score is stored under.

    Raises:
        ConfigurationError: If the file is not valid YAML, is not a mapping,
            or holds a non-integer score for ``namespace``.
    """

    def __init__(self, path: str | pathlib.Path, namespace: str = "scores") -> None:
        self.path = pathlib.Path(path)
        self.namespace = namespace
        self._lock = threading.Lock()
        best = self._load().get(namespace, 0)
        if isinstance(best, bool) or not isinstance(best, int):
            raise ConfigurationError(
                f"Best score for {namespace!r} must be an integer, got {best!r}: {self.path}"
            )
        self._best = best

    @property
    def best(self) -> int:
        return self._best

    def submit(self, score: int) -> bool:
        """Record ``score`` if it beats the stored best.

        Returns:
            True if the best score was updated.
        """
        with self._lock:
            if score <= self._best:
                return False
            self._best = score
            data = self._load()
            data[self.namespace] = score
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False)
            return True

    def listener(self, event: GameEvent, state: GameState) -> None:
        """GameSession listener: submit the score whenever it changes."""
        if event == GameEvent.SCORE_CHANGED:
            self.submit(state.score)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Best score file is not valid YAML: {self.path}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Best score file is not a mapping: {self.path}")
        return data
