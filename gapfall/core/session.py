"""
Session State
=============

The mutable world of one play session: the player, the obstacle sequence,
score, timers, and the state-machine position. Every subsystem takes a
Session and mutates it in place; nothing else holds world state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from gapfall.core.config_loader import GameConfig


class GameState(str, Enum):
    """State machine positions."""
    IDLE = "idle"
    PLAYING = "playing"
    LOST = "lost"
    WON = "won"


@dataclass
class Player:
    """The player circle. Only y and velocity change during a session."""
    x: float
    y: float
    radius: float
    velocity: float = 0.0

    @property
    def top(self) -> float:
        return self.y - self.radius

    @property
    def bottom(self) -> float:
        return self.y + self.radius

    @property
    def left(self) -> float:
        return self.x - self.radius

    @property
    def right(self) -> float:
        return self.x + self.radius


@dataclass
class Obstacle:
    """
    A vertical barrier pair scrolling leftward.

    The safe passage spans [gap_top, gap_top + gap_height].
    """
    x: float
    gap_top: float
    gap_height: float
    width: float
    passed: bool = False

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def gap_bottom(self) -> float:
        return self.gap_top + self.gap_height

    def mark_passed(self) -> bool:
        """Set the passed flag. Returns True only on the first call."""
        if self.passed:
            return False
        self.passed = True
        return True


@dataclass
class Session:
    """Aggregate of all per-session world state."""
    player: Player
    area_width: float
    area_height: float
    obstacles: List[Obstacle] = field(default_factory=list)
    score: int = 0
    state: GameState = GameState.IDLE
    spawn_timer: float = 0.0          # ms since last spawn
    boost_remaining: float = 0.0      # ms
    collision_cooldown: float = 0.0   # ms
    boost_granted: bool = False
    hint_visible: bool = True
    ticks: int = 0

    @property
    def is_playing(self) -> bool:
        return self.state is GameState.PLAYING

    @property
    def is_over(self) -> bool:
        return self.state in (GameState.LOST, GameState.WON)

    @property
    def boost_active(self) -> bool:
        return self.boost_remaining > 0.0

    @property
    def cooldown_active(self) -> bool:
        return self.collision_cooldown > 0.0

    def unpassed(self) -> List[Obstacle]:
        """Obstacles not yet cleared, in spawn order."""
        return [obs for obs in self.obstacles if not obs.passed]


def new_session(config: GameConfig, area_width: float, area_height: float) -> Session:
    """
    Create a fresh session with the player at its start position.

    Args:
        config: Game configuration.
        area_width: Current play area width.
        area_height: Current play area height.

    Returns:
        Session in the IDLE state.
    """
    player = Player(
        x=config.player.start_x,
        y=area_height / 2,
        radius=config.player.radius,
        velocity=0.0
    )
    return Session(
        player=player,
        area_width=area_width,
        area_height=area_height
    )
