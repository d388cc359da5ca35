"""
Game Rules
==========

Handles termination conditions, session timers, and the boost window.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gapfall.core.config_loader import GameConfig, get_config
from gapfall.core.scoring import SOURCE_PASS, ScoreEvent
from gapfall.core.session import Session


REASON_OUT_OF_BOUNDS = "out_of_bounds"
REASON_COLLISION = "collision"
REASON_TARGET = "target_reached"


@dataclass
class TerminationResult:
    """Result of termination check."""
    lost: bool
    won: bool
    reason: str

    @property
    def terminal(self) -> bool:
        return self.lost or self.won

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, False, reason)

    @staticmethod
    def victory() -> "TerminationResult":
        return TerminationResult(False, True, REASON_TARGET)


class TerminationRules:
    """
    Handles game termination conditions.

    - Out of bounds: player extent leaves the play area (never forgiven)
    - Target: score reaches the target score
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize termination rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._target = config.scoring.target_score

    def check_bounds(self, session: Session) -> TerminationResult:
        """Player bottom below the floor or top above the ceiling loses."""
        player = session.player
        if player.bottom > session.area_height or player.top < 0:
            return TerminationResult.game_over(REASON_OUT_OF_BOUNDS)
        return TerminationResult.none()

    def check_target(self, session: Session) -> TerminationResult:
        if session.score >= self._target:
            return TerminationResult.victory()
        return TerminationResult.none()


class TimerRules:
    """Counts down the boost and collision-cooldown timers."""

    def countdown(self, session: Session, delta_ms: float) -> None:
        """Decrease both timers by delta_ms, never below zero."""
        if session.boost_remaining > 0.0:
            session.boost_remaining = max(0.0, session.boost_remaining - delta_ms)
        if session.collision_cooldown > 0.0:
            session.collision_cooldown = max(0.0, session.collision_cooldown - delta_ms)


class BoostRules:
    """
    Grants the boost window at the score milestone.

    Only a normal pass landing exactly on the milestone counts; points
    credited by a skip event never do.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._enabled = config.boost_enabled
        self._milestone = config.boost.milestone
        self._duration = config.boost.duration_ms
        self._impulse = config.boost.impulse

    @property
    def enabled(self) -> bool:
        return self._enabled

    def should_arm(self, session: Session, event: ScoreEvent) -> bool:
        if not self._enabled or session.boost_granted:
            return False
        return event.source == SOURCE_PASS and event.score_after == self._milestone

    def arm(self, session: Session) -> None:
        """Start the boost window and kick the player upward."""
        session.boost_remaining = self._duration
        session.boost_granted = True
        session.player.velocity = self._impulse


class GameRules:
    """
    Combined interface for all game rules.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize game rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self.termination = TerminationRules(config)
        self.timers = TimerRules()
        self.boost = BoostRules(config)
