"""
State Snapshot
==============

Immutable view of a session, handed to render sinks each frame and packed
into fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from gapfall.core.config_loader import GameConfig, get_config
from gapfall.core.session import GameState, Session

STATE_INDEX = {
    GameState.IDLE: 0,
    GameState.PLAYING: 1,
    GameState.LOST: 2,
    GameState.WON: 3,
}


@dataclass(frozen=True)
class ObstacleView:
    """Read-only obstacle geometry."""
    x: float
    gap_top: float
    gap_height: float
    width: float
    passed: bool


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Complete session state at one instant.

    Two snapshots compare equal when every field matches, which makes
    reset idempotency directly checkable.
    """
    state: GameState
    player_x: float
    player_y: float
    player_radius: float
    player_velocity: float
    obstacles: Tuple[ObstacleView, ...]
    score: int
    target_score: int
    spawn_timer: float
    boost_remaining: float
    collision_cooldown: float
    hint_visible: bool
    area_width: float
    area_height: float
    ticks: int

    @property
    def boost_active(self) -> bool:
        return self.boost_remaining > 0.0

    def to_obs_dict(self, max_obstacles: int) -> Dict[str, np.ndarray]:
        """
        Convert to Gymnasium observation dictionary.

        Obstacles beyond max_obstacles are dropped (oldest first kept).
        """
        obs_x = np.zeros(max_obstacles, dtype=np.float32)
        obs_gap_top = np.zeros(max_obstacles, dtype=np.float32)
        obs_gap_bottom = np.zeros(max_obstacles, dtype=np.float32)
        obs_passed = np.zeros(max_obstacles, dtype=np.int8)
        obs_mask = np.zeros(max_obstacles, dtype=np.int8)

        for i, obstacle in enumerate(self.obstacles[:max_obstacles]):
            obs_x[i] = obstacle.x
            obs_gap_top[i] = obstacle.gap_top
            obs_gap_bottom[i] = obstacle.gap_top + obstacle.gap_height
            obs_passed[i] = 1 if obstacle.passed else 0
            obs_mask[i] = 1

        return {
            # Player
            "player_x": np.array(self.player_x, dtype=np.float32),
            "player_y": np.array(self.player_y, dtype=np.float32),
            "player_velocity": np.array(self.player_velocity, dtype=np.float32),
            "player_radius": np.array(self.player_radius, dtype=np.float32),

            # Session
            "state": np.array(STATE_INDEX[self.state], dtype=np.int64),
            "score": np.array(self.score, dtype=np.int64),
            "target_score": np.array(self.target_score, dtype=np.int64),
            "boost_remaining": np.array(self.boost_remaining, dtype=np.float32),
            "collision_cooldown": np.array(self.collision_cooldown, dtype=np.float32),

            # Play area
            "area_width": np.array(self.area_width, dtype=np.float32),
            "area_height": np.array(self.area_height, dtype=np.float32),

            # Obstacle arrays
            "obstacles_count": np.array(min(len(self.obstacles), max_obstacles), dtype=np.int64),
            "obs_x": obs_x,
            "obs_gap_top": obs_gap_top,
            "obs_gap_bottom": obs_gap_bottom,
            "obs_passed": obs_passed,
            "obs_mask": obs_mask,
        }


class SnapshotBuilder:
    """Builds snapshots from live sessions."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._target = config.scoring.target_score

    def build(self, session: Session) -> SessionSnapshot:
        player = session.player
        obstacles = tuple(
            ObstacleView(
                x=obs.x,
                gap_top=obs.gap_top,
                gap_height=obs.gap_height,
                width=obs.width,
                passed=obs.passed
            )
            for obs in session.obstacles
        )
        return SessionSnapshot(
            state=session.state,
            player_x=player.x,
            player_y=player.y,
            player_radius=player.radius,
            player_velocity=player.velocity,
            obstacles=obstacles,
            score=session.score,
            target_score=self._target,
            spawn_timer=session.spawn_timer,
            boost_remaining=session.boost_remaining,
            collision_cooldown=session.collision_cooldown,
            hint_visible=session.hint_visible,
            area_width=session.area_width,
            area_height=session.area_height,
            ticks=session.ticks
        )
