"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


VARIANTS = ("baseline", "extended")
POLICY_HARD_FAIL = "hard_fail"
POLICY_FORGIVING = "forgiving"


@dataclass(frozen=True)
class BoardConfig:
    """Play area size in pixels."""
    width: float
    height: float


@dataclass(frozen=True)
class PlayerConfig:
    """Player start position and size."""
    start_x: float
    radius: float


@dataclass(frozen=True)
class PhysicsConfig:
    """Per-tick vertical physics."""
    gravity: float        # Added to velocity every tick (px/tick^2)
    jump_impulse: float   # Velocity set by a jump (negative = up)


@dataclass(frozen=True)
class ObstacleConfig:
    """Obstacle geometry, scrolling and spawning."""
    width: float
    gap_height: float
    speed: float                # Leftward scroll per tick (px)
    spawn_interval_ms: float
    min_gap_margin: float       # Minimum distance between gap and play area edges
    spawn_offset: float         # Spawn distance beyond the right edge
    prune_margin: float         # Distance beyond the left edge before removal


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    target_score: int


@dataclass(frozen=True)
class CollisionConfig:
    """Forgiving collision policy parameters."""
    cooldown_ms: float
    max_skip: int
    skip_impulse: float


@dataclass(frozen=True)
class BoostConfig:
    """Boost power-up parameters."""
    milestone: int
    duration_ms: float
    gravity_multiplier: float
    speed_multiplier: float
    impulse: float


@dataclass(frozen=True)
class DriverConfig:
    """Frame driver parameters."""
    frame_ms: float
    max_delta_ms: Optional[float]


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    max_obstacles: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    variant: str
    board: BoardConfig
    player: PlayerConfig
    physics: PhysicsConfig
    obstacles: ObstacleConfig
    scoring: ScoringConfig
    collision: CollisionConfig
    boost: BoostConfig
    driver: DriverConfig
    observation: ObservationConfig

    @property
    def collision_policy(self) -> str:
        """Collision policy name derived from the variant."""
        if self.variant == "extended":
            return POLICY_FORGIVING
        return POLICY_HARD_FAIL

    @property
    def boost_enabled(self) -> bool:
        """True if the milestone boost is active for this variant."""
        return self.variant == "extended"

    @property
    def min_gap_top(self) -> float:
        """Smallest allowed gap-top offset."""
        return self.obstacles.min_gap_margin

    @property
    def max_gap_top(self) -> float:
        """Largest allowed gap-top offset for the current board height."""
        return (
            self.board.height
            - self.obstacles.gap_height
            - self.obstacles.min_gap_margin
        )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.variant not in VARIANTS:
        raise ValueError(f"variant must be one of {VARIANTS}, got '{config.variant}'")

    if config.board.width <= 0 or config.board.height <= 0:
        raise ValueError(
            f"Board size must be positive, got {config.board.width}x{config.board.height}"
        )

    if config.max_gap_top < config.min_gap_top:
        raise ValueError(
            f"Board height ({config.board.height}) too small for gap_height "
            f"({config.obstacles.gap_height}) with min_gap_margin "
            f"({config.obstacles.min_gap_margin})"
        )

    if config.scoring.target_score < 1:
        raise ValueError(f"target_score must be >= 1, got {config.scoring.target_score}")

    if config.obstacles.spawn_interval_ms <= 0:
        raise ValueError("spawn_interval_ms must be positive")

    if config.collision.max_skip < 1:
        raise ValueError(f"max_skip must be >= 1, got {config.collision.max_skip}")

    if config.collision.skip_impulse < config.physics.jump_impulse:
        # A skip bounce must be softer than a manual jump
        raise ValueError(
            f"skip_impulse ({config.collision.skip_impulse}) must be weaker than "
            f"jump_impulse ({config.physics.jump_impulse})"
        )

    for name in ("gravity_multiplier", "speed_multiplier"):
        value = getattr(config.boost, name)
        if not 0.0 < value <= 1.0:
            raise ValueError(f"boost.{name} must be in (0, 1], got {value}")

    if config.driver.max_delta_ms is not None and config.driver.max_delta_ms <= 0:
        raise ValueError("driver.max_delta_ms must be positive or null")


def build_config(raw: dict, variant: Optional[str] = None) -> GameConfig:
    """
    Build a validated GameConfig from a parsed YAML mapping.

    Args:
        raw: Parsed YAML document.
        variant: Overrides the file's variant if given.

    Returns:
        Validated GameConfig instance.
    """
    board_data = raw["board"]
    board = BoardConfig(
        width=float(board_data["width"]),
        height=float(board_data["height"])
    )

    player_data = raw["player"]
    player = PlayerConfig(
        start_x=float(player_data["start_x"]),
        radius=float(player_data["radius"])
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity=float(physics_data["gravity"]),
        jump_impulse=float(physics_data["jump_impulse"])
    )

    obs_data = raw["obstacles"]
    obstacles = ObstacleConfig(
        width=float(obs_data["width"]),
        gap_height=float(obs_data["gap_height"]),
        speed=float(obs_data["speed"]),
        spawn_interval_ms=float(obs_data["spawn_interval_ms"]),
        min_gap_margin=float(obs_data.get("min_gap_margin", 60)),
        spawn_offset=float(obs_data.get("spawn_offset", 20)),
        prune_margin=float(obs_data.get("prune_margin", 20))
    )

    scoring = ScoringConfig(
        target_score=int(raw["scoring"]["target_score"])
    )

    # Optional sections (only read by the extended variant)
    collision_data = raw.get("collision", {})
    collision = CollisionConfig(
        cooldown_ms=float(collision_data.get("cooldown_ms", 900.0)),
        max_skip=int(collision_data.get("max_skip", 5)),
        skip_impulse=float(collision_data.get("skip_impulse", -4.0))
    )

    boost_data = raw.get("boost", {})
    boost = BoostConfig(
        milestone=int(boost_data.get("milestone", 10)),
        duration_ms=float(boost_data.get("duration_ms", 4000.0)),
        gravity_multiplier=float(boost_data.get("gravity_multiplier", 0.6)),
        speed_multiplier=float(boost_data.get("speed_multiplier", 0.6)),
        impulse=float(boost_data.get("impulse", -4.5))
    )

    driver_data = raw.get("driver", {})
    max_delta = driver_data.get("max_delta_ms")
    driver = DriverConfig(
        frame_ms=float(driver_data.get("frame_ms", 1000.0 / 60.0)),
        max_delta_ms=float(max_delta) if max_delta is not None else None
    )

    observation_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_obstacles=int(observation_data.get("max_obstacles", 6))
    )

    config = GameConfig(
        variant=str(variant if variant is not None else raw.get("variant", "baseline")),
        board=board,
        player=player,
        physics=physics,
        obstacles=obstacles,
        scoring=scoring,
        collision=collision,
        boost=boost,
        driver=driver,
        observation=observation
    )

    _validate_config(config)
    return config


def load_config(
    config_path: Optional[str] = None,
    variant: Optional[str] = None
) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.
        variant: "baseline" or "extended". Uses the file's value if None.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    return build_config(raw, variant=variant)


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(
    config_path: Optional[str] = None,
    variant: Optional[str] = None
) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path, variant=variant)
    return _cached_config
