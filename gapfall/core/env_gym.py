"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the Gapfall game.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from gapfall.core.collision import OUTCOME_SKIP
from gapfall.core.config_loader import GameConfig, load_config
from gapfall.core.game import CoreGame
from gapfall.core.render_solid import SolidRenderer
from gapfall.core.state_snapshot import SessionSnapshot

ACTION_NOOP = 0
ACTION_JUMP = 1


class GapfallEnv(gym.Env):
    """
    Gapfall as a Gymnasium environment.

    Action Space:
        Discrete(2): 0 = do nothing, 1 = jump.

    Observation Space:
        Dict with player state, session timers, and fixed-size obstacle
        arrays (masked).

    Step:
        One frame of driver.frame_ms milliseconds.

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.
    """

    metadata = {
        "render_modes": ["rgb_array"],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        variant: Optional[str] = None,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        max_episode_ticks: Optional[int] = None,
        debug: bool = False,
    ):
        """
        Initialize Gapfall environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            variant: "baseline" or "extended". Uses the file's value if None.
            config: Pre-built config. Overrides config_path and variant.
            render_mode: "rgb_array" for numpy frames, None for headless.
            max_episode_ticks: Truncate episodes after this many ticks.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        if config is None:
            config = load_config(config_path, variant=variant)
        self._config = config

        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"Unsupported render_mode: {render_mode}")

        self.render_mode = render_mode
        self._max_episode_ticks = max_episode_ticks
        self._debug = debug
        self._frame_ms = config.driver.frame_ms

        self._game = CoreGame(config=config)
        self._renderer: Optional[SolidRenderer] = None
        self._last_snapshot: Optional[SessionSnapshot] = None

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] GapfallEnv initialized")
            print(f"[DEBUG]   Variant: {config.variant} ({config.collision_policy})")
            print(f"[DEBUG]   Board: {config.board.width}x{config.board.height}")
            print(f"[DEBUG]   Target score: {config.scoring.target_score}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_obs = self._config.observation.max_obstacles
        board = self._config.board
        big = np.float32(1e6)

        return spaces.Dict({
            # Player
            "player_x": spaces.Box(low=0, high=board.width, shape=(), dtype=np.float32),
            "player_y": spaces.Box(low=-big, high=big, shape=(), dtype=np.float32),
            "player_velocity": spaces.Box(low=-big, high=big, shape=(), dtype=np.float32),
            "player_radius": spaces.Box(low=0, high=board.height, shape=(), dtype=np.float32),

            # Session
            "state": spaces.Box(low=0, high=3, shape=(), dtype=np.int64),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "target_score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "boost_remaining": spaces.Box(low=0, high=big, shape=(), dtype=np.float32),
            "collision_cooldown": spaces.Box(low=0, high=big, shape=(), dtype=np.float32),

            # Play area
            "area_width": spaces.Box(low=0, high=big, shape=(), dtype=np.float32),
            "area_height": spaces.Box(low=0, high=big, shape=(), dtype=np.float32),

            # Obstacle arrays
            "obstacles_count": spaces.Box(low=0, high=max_obs, shape=(), dtype=np.int64),
            "obs_x": spaces.Box(low=-big, high=big, shape=(max_obs,), dtype=np.float32),
            "obs_gap_top": spaces.Box(low=0, high=big, shape=(max_obs,), dtype=np.float32),
            "obs_gap_bottom": spaces.Box(low=0, high=big, shape=(max_obs,), dtype=np.float32),
            "obs_passed": spaces.MultiBinary(max_obs),
            "obs_mask": spaces.MultiBinary(max_obs),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        The session starts directly in PLAYING, as after a retry.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        snapshot = self._game.retry(seed=seed)
        self._last_snapshot = snapshot

        obs = snapshot.to_obs_dict(self._config.observation.max_obstacles)
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one frame.

        Args:
            action: 1 to jump this frame, 0 otherwise.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())

        if int(action) == ACTION_JUMP:
            self._game.jump()

        result = self._game.tick(self._frame_ms)
        self._last_snapshot = result.snapshot

        obs = result.snapshot.to_obs_dict(self._config.observation.max_obstacles)
        reward = 0.0

        terminated = bool(self._game.is_over)
        truncated = False
        if (
            not terminated
            and self._max_episode_ticks is not None
            and self._game.session.ticks >= self._max_episode_ticks
        ):
            truncated = True

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["skips"] = sum(1 for c in result.collisions if c.kind == OUTCOME_SKIP)
        info["boost_armed"] = result.boost_armed

        if self._debug:
            print(f"[DEBUG] Step: action={action}, y={float(obs['player_y']):.1f}, "
                  f"v={float(obs['player_velocity']):.2f}, score={info['score']}")
            if terminated:
                print(f"[DEBUG] TERMINATED: {info.get('terminated_reason', 'unknown')}")

        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode != "rgb_array":
            return None

        if self._renderer is None:
            self._renderer = SolidRenderer(self._config)

        snapshot = self._last_snapshot or self._game.snapshot()
        return self._renderer.render(
            snapshot,
            int(snapshot.area_width),
            int(snapshot.area_height)
        )

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
