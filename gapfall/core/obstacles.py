"""
Obstacle Generator
==================

Spawns obstacles on a fixed interval and prunes the ones that scrolled
off the left edge.
"""

from __future__ import annotations

from typing import Optional

from gapfall.core.config_loader import GameConfig, get_config
from gapfall.core.rng import GapSampler, RandomSource
from gapfall.core.session import Obstacle, Session


class ObstacleGenerator:
    """
    Interval spawner with randomized gap placement.

    The accumulator is zeroed on every spawn rather than decremented by the
    interval, so any overshoot is dropped and real spawn spacing stretches
    slightly under frame jitter.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[RandomSource] = None
    ):
        """
        Initialize generator.

        Args:
            config: Game configuration. Uses default if None.
            rng: Random source with a random() method. Unseeded GapSampler if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else GapSampler()
        self._interval = config.obstacles.spawn_interval_ms
        self._width = config.obstacles.width
        self._gap_height = config.obstacles.gap_height
        self._margin = config.obstacles.min_gap_margin
        self._spawn_offset = config.obstacles.spawn_offset
        self._prune_margin = config.obstacles.prune_margin

    @property
    def offscreen_x(self) -> float:
        """An x position that is pruned on the next prune pass."""
        return -(self._width + self._prune_margin) - 1.0

    def gap_range(self, area_height: float) -> tuple:
        """
        Valid (min, max) gap-top offsets for a play area height.

        Returns:
            (min_gap_top, max_gap_top) tuple.
        """
        min_top = self._margin
        max_top = area_height - self._gap_height - self._margin
        return (min_top, max_top)

    def make_obstacle(self, session: Session) -> Obstacle:
        """Create an obstacle at the right edge with a random gap."""
        min_top, max_top = self.gap_range(session.area_height)
        gap_top = self._rng.random() * (max_top - min_top) + min_top
        return Obstacle(
            x=session.area_width + self._spawn_offset,
            gap_top=gap_top,
            gap_height=self._gap_height,
            width=self._width
        )

    def update(self, session: Session, delta_ms: float) -> Optional[Obstacle]:
        """
        Advance the spawn accumulator and spawn if the interval is exceeded.

        Args:
            session: Session to spawn into.
            delta_ms: Elapsed time since the previous tick.

        Returns:
            The spawned obstacle, or None.
        """
        session.spawn_timer += delta_ms
        if session.spawn_timer > self._interval:
            obstacle = self.make_obstacle(session)
            session.obstacles.append(obstacle)
            session.spawn_timer = 0.0
            return obstacle
        return None

    def prune(self, session: Session) -> int:
        """
        Drop obstacles fully past the left margin.

        Returns:
            Number of obstacles removed.
        """
        before = len(session.obstacles)
        session.obstacles = [
            obs for obs in session.obstacles
            if obs.right > -self._prune_margin
        ]
        return before - len(session.obstacles)

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset the random source if it supports reseeding."""
        reset = getattr(self._rng, "reset", None)
        if reset is not None:
            reset(seed)
