"""
Scoring System
==============

Tracks the current run's score and the session best score.
"""

from __future__ import annotations

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

ScoreListener = Callable[[int, int], None]


class ScoreTracker:
    """
    Score for the current run plus the best score for this process.

    The best score lives only in memory and never decreases. Listeners are
    called with (score, best_score) on every change.
    """

    def __init__(self):
        self._score: int = 0
        self._best_score: int = 0
        self._listeners: List[ScoreListener] = []

    @property
    def score(self) -> int:
        """Current run score."""
        return self._score

    @property
    def best_score(self) -> int:
        """Best final score seen this session."""
        return self._best_score

    def add_listener(self, listener: ScoreListener) -> None:
        """Register a callback for score changes."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ScoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._score, self._best_score)

    def apply_passes(self, count: int) -> int:
        """
        Add one point per obstacle passed.

        Args:
            count: Obstacles passed this tick.

        Returns:
            Points added.
        """
        if count <= 0:
            return 0
        self._score += count
        self._notify()
        return count

    def finish_run(self) -> int:
        """
        Fold the current score into the best score.

        Returns:
            The (possibly unchanged) best score.
        """
        if self._score > self._best_score:
            logger.info("New best score: %d (was %d)", self._score, self._best_score)
            self._best_score = self._score
        self._notify()
        return self._best_score

    def reset(self) -> None:
        """Reset the run score to zero. The best score is kept."""
        self._score = 0
        self._notify()
