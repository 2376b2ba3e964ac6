"""
RNG - Gap Sampler
=================

Provides deterministic gap placement for obstacles. The random source is
injected so runs can be replayed from a seed.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Optional, Tuple

from flapgate.flap_core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)


class GapSampler:
    """
    Draws gap-center Y coordinates uniformly from the configured range.

    The range is narrowed so the whole gap stays between the ceiling and
    the ground line. When nothing is left (margin or gap too large for the
    play-field), every sample is clamped to the middle of that span.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize gap sampler.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
            rng: Pre-built random source. Takes precedence over seed.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._rng = rng if rng is not None else random.Random(seed)

        low, high = config.gap_y_range
        ground_y = config.playfield.ground_y
        half_gap = config.obstacles.gap_size / 2
        low = max(low, half_gap)
        high = min(high, ground_y - half_gap)

        self._degenerate = low > high
        if self._degenerate:
            mid = (low + high) / 2
            self._low = self._high = mid
            logger.warning(
                "Gap %.1f with margin %.1f does not fit a %.1f px field; "
                "clamping gap centers to %.1f",
                config.obstacles.gap_size, config.obstacles.min_gap_margin,
                ground_y, mid
            )
        else:
            self._low, self._high = low, high

    @property
    def gap_range(self) -> Tuple[float, float]:
        """Effective (min, max) gap-center range after clamping."""
        return (self._low, self._high)

    @property
    def is_degenerate(self) -> bool:
        """True if the configured range had to be clamped."""
        return self._degenerate

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def sample(self) -> float:
        """Draw one gap-center Y."""
        value = self._rng.random() * (self._high - self._low) + self._low
        return min(max(value, self._low), self._high)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the sampler with optional new seed.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
            self._rng = random.Random(seed)

    def get_state(self) -> Any:
        """Get the random source state for checkpointing."""
        return self._rng.getstate()

    def set_state(self, state: Any) -> None:
        """Restore the random source state."""
        self._rng.setstate(state)
