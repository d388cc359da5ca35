"""
Scoring System
==============

Credits obstacle clears to the session score and records score events.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gapfall.core.config_loader import GameConfig, get_config
from gapfall.core.session import Obstacle, Session


SOURCE_PASS = "pass"
SOURCE_SKIP = "skip"


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    source: str        # SOURCE_PASS or SOURCE_SKIP
    score_after: int

    def __repr__(self) -> str:
        return f"ScoreEvent({self.source}=+{self.points}, total={self.score_after})"


class ScoreTracker:
    """
    Applies obstacle clears to a session.

    Each obstacle contributes exactly one point, the first time its passed
    flag is set. Score never decreases within a session.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._target = config.scoring.target_score

    @property
    def target(self) -> int:
        """Score needed to win."""
        return self._target

    def is_cleared(self, obstacle: Obstacle, session: Session) -> bool:
        """True once the obstacle's right edge is left of the player's left edge."""
        return obstacle.right < session.player.left

    def credit_pass(self, session: Session, obstacle: Obstacle) -> Optional[ScoreEvent]:
        """
        Mark one obstacle passed by normal flight and score it.

        Returns:
            ScoreEvent, or None if the obstacle was already passed.
        """
        if not obstacle.mark_passed():
            return None
        session.score += 1
        return ScoreEvent(points=1, source=SOURCE_PASS, score_after=session.score)

    def credit_skip(self, session: Session, max_skip: int) -> Optional[ScoreEvent]:
        """
        Batch-mark up to max_skip unpassed obstacles, in spawn order.

        Returns:
            ScoreEvent for the batch, or None if nothing was pending.
        """
        credited = 0
        for obstacle in session.unpassed()[:max_skip]:
            if obstacle.mark_passed():
                credited += 1
        if credited == 0:
            return None
        session.score += credited
        return ScoreEvent(points=credited, source=SOURCE_SKIP, score_after=session.score)
