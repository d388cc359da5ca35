"""
Gapfall Core - The simulation at the heart of the game.

This module provides the real-time simulation loop, its frame driver,
collaborator interfaces, and a Gymnasium environment wrapper.

Main exports:
- CoreGame: Session state machine and per-tick simulation
- FrameDriver: Per-frame clock that drives CoreGame while playing
- GapfallEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
"""

from gapfall.core.config_loader import GameConfig, load_config
from gapfall.core.session import GameState, Obstacle, Player, Session
from gapfall.core.game import CoreGame, TickResult
from gapfall.core.driver import FrameDriver
from gapfall.core.interfaces import Collaborators, LifecycleEvent
from gapfall.core.rng import GapSampler, SequenceSource
from gapfall.core.state_snapshot import SessionSnapshot
from gapfall.core.env_gym import GapfallEnv

__all__ = [
    "GameConfig",
    "load_config",
    "GameState",
    "Obstacle",
    "Player",
    "Session",
    "CoreGame",
    "TickResult",
    "FrameDriver",
    "Collaborators",
    "LifecycleEvent",
    "GapSampler",
    "SequenceSource",
    "SessionSnapshot",
    "GapfallEnv",
]
