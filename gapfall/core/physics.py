"""
Physics Integrator
==================

Vertical motion of the player and horizontal scrolling of obstacles.
Values are per tick, matching the frame-stepped feel of the game: Δt only
drives timers, never the integration.
"""

from __future__ import annotations

from typing import Optional

from gapfall.core.config_loader import GameConfig, get_config
from gapfall.core.session import Session


class PhysicsIntegrator:
    """
    Advances the player under gravity and scrolls the obstacle sequence.

    During an active boost window both gravity and scroll speed are scaled
    down by the configured multipliers.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize integrator.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._gravity = config.physics.gravity
        self._jump_impulse = config.physics.jump_impulse
        self._speed = config.obstacles.speed

    @property
    def jump_impulse(self) -> float:
        return self._jump_impulse

    def gravity_multiplier(self, session: Session) -> float:
        """Effective gravity scale for this tick."""
        if self._config.boost_enabled and session.boost_active:
            return self._config.boost.gravity_multiplier
        return 1.0

    def speed_multiplier(self, session: Session) -> float:
        """Effective scroll speed scale for this tick."""
        if self._config.boost_enabled and session.boost_active:
            return self._config.boost.speed_multiplier
        return 1.0

    def step_player(self, session: Session) -> None:
        """Velocity first, then position."""
        player = session.player
        player.velocity += self._gravity * self.gravity_multiplier(session)
        player.y += player.velocity

    def scroll_obstacles(self, session: Session) -> None:
        """Move every obstacle left by one tick of scroll."""
        dx = self._speed * self.speed_multiplier(session)
        for obstacle in session.obstacles:
            obstacle.x -= dx

    def jump(self, session: Session) -> None:
        """Replace accumulated velocity with the jump impulse."""
        session.player.velocity = self._jump_impulse
