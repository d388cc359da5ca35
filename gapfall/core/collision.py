"""
Collision & Scoring Engine
==========================

Detects obstacle clears and obstacle hits, and applies the active
collision policy:

- hard_fail: any hit ends the session.
- forgiving: a hit outside the cooldown becomes a skip event that credits
  pending obstacles, throws the culprit off-screen, bounces the player,
  and arms the cooldown.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from gapfall.core.config_loader import (
    GameConfig, get_config, POLICY_FORGIVING, POLICY_HARD_FAIL
)
from gapfall.core.obstacles import ObstacleGenerator
from gapfall.core.rules import GameRules, TerminationResult, REASON_COLLISION
from gapfall.core.scoring import ScoreEvent, ScoreTracker
from gapfall.core.session import Obstacle, Player, Session

logger = logging.getLogger(__name__)


OUTCOME_FATAL = "fatal"
OUTCOME_SUPPRESSED = "suppressed"
OUTCOME_SKIP = "skip"


def overlaps_x(player: Player, obstacle: Obstacle) -> bool:
    """Player's horizontal extent intersects the obstacle's."""
    return player.right > obstacle.x and player.left < obstacle.right


def inside_gap(player: Player, obstacle: Obstacle) -> bool:
    """Player's vertical extent lies strictly inside the gap."""
    return player.top > obstacle.gap_top and player.bottom < obstacle.gap_bottom


def is_hit(player: Player, obstacle: Obstacle) -> bool:
    return overlaps_x(player, obstacle) and not inside_gap(player, obstacle)


@dataclass
class CollisionOutcome:
    """How a single hit was resolved."""
    kind: str
    obstacle: Obstacle
    score_event: Optional[ScoreEvent] = None


@dataclass
class PassResult:
    """Obstacle clears credited during one tick."""
    events: List[ScoreEvent] = field(default_factory=list)
    boost_armed: bool = False
    termination: TerminationResult = field(default_factory=TerminationResult.none)


@dataclass
class HitResult:
    """Obstacle hits resolved during one tick."""
    outcomes: List[CollisionOutcome] = field(default_factory=list)
    termination: TerminationResult = field(default_factory=TerminationResult.none)

    @property
    def score_events(self) -> List[ScoreEvent]:
        return [o.score_event for o in self.outcomes if o.score_event is not None]


class CollisionPolicy(ABC):
    """Base class for hit responses."""

    name = ""

    @abstractmethod
    def resolve(self, session: Session, obstacle: Obstacle) -> CollisionOutcome:
        """Decide what a single hit does to the session."""


class HardFailPolicy(CollisionPolicy):
    """Every hit is fatal."""

    name = POLICY_HARD_FAIL

    def resolve(self, session: Session, obstacle: Obstacle) -> CollisionOutcome:
        return CollisionOutcome(kind=OUTCOME_FATAL, obstacle=obstacle)


class ForgivingPolicy(CollisionPolicy):
    """
    Converts hits into skip events, rate-limited by a cooldown.

    While the cooldown runs, hits are ignored entirely: no score change and
    no impulse.
    """

    name = POLICY_FORGIVING

    def __init__(
        self,
        config: GameConfig,
        scorer: ScoreTracker,
        generator: ObstacleGenerator
    ):
        self._scorer = scorer
        self._generator = generator
        self._cooldown = config.collision.cooldown_ms
        self._max_skip = config.collision.max_skip
        self._skip_impulse = config.collision.skip_impulse

    def resolve(self, session: Session, obstacle: Obstacle) -> CollisionOutcome:
        if session.cooldown_active:
            return CollisionOutcome(kind=OUTCOME_SUPPRESSED, obstacle=obstacle)

        event = self._scorer.credit_skip(session, self._max_skip)
        obstacle.x = self._generator.offscreen_x
        session.player.velocity = self._skip_impulse
        session.collision_cooldown = self._cooldown

        logger.debug(
            "skip event: credited=%d score=%d",
            event.points if event is not None else 0, session.score
        )
        return CollisionOutcome(kind=OUTCOME_SKIP, obstacle=obstacle, score_event=event)


def make_policy(
    config: GameConfig,
    scorer: ScoreTracker,
    generator: ObstacleGenerator
) -> CollisionPolicy:
    """Build the policy selected by the config variant."""
    if config.collision_policy == POLICY_FORGIVING:
        return ForgivingPolicy(config, scorer, generator)
    return HardFailPolicy()


class CollisionEngine:
    """
    Per-tick pass detection and hit resolution.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        scorer: Optional[ScoreTracker] = None,
        rules: Optional[GameRules] = None,
        generator: Optional[ObstacleGenerator] = None
    ):
        """
        Initialize engine.

        Args:
            config: Game configuration. Uses default if None.
            scorer: Shared score tracker. Created if None.
            rules: Shared rules. Created if None.
            generator: Obstacle generator (for off-screen placement). Created if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._scorer = scorer if scorer is not None else ScoreTracker(config)
        self._rules = rules if rules is not None else GameRules(config)
        self._generator = generator if generator is not None else ObstacleGenerator(config)
        self._policy = make_policy(config, self._scorer, self._generator)

    @property
    def policy(self) -> CollisionPolicy:
        return self._policy

    def update_passes(self, session: Session) -> PassResult:
        """
        Credit every obstacle cleared this tick.

        Stops at the first clear that reaches the target score.
        """
        result = PassResult()
        boost = self._rules.boost

        for obstacle in session.obstacles:
            if obstacle.passed or not self._scorer.is_cleared(obstacle, session):
                continue

            event = self._scorer.credit_pass(session, obstacle)
            if event is None:
                continue
            result.events.append(event)

            if boost.should_arm(session, event):
                boost.arm(session)
                result.boost_armed = True

            termination = self._rules.termination.check_target(session)
            if termination.terminal:
                result.termination = termination
                break

        return result

    def check_hits(self, session: Session) -> HitResult:
        """
        Resolve every obstacle hit under the active policy.

        A fatal hit or a skip event that reaches the target ends the scan.
        """
        result = HitResult()
        player = session.player

        for obstacle in list(session.obstacles):
            if not is_hit(player, obstacle):
                continue

            outcome = self._policy.resolve(session, obstacle)
            result.outcomes.append(outcome)

            if outcome.kind == OUTCOME_FATAL:
                result.termination = TerminationResult.game_over(REASON_COLLISION)
                break

            if outcome.kind == OUTCOME_SKIP:
                termination = self._rules.termination.check_target(session)
                if termination.terminal:
                    result.termination = termination
                    break

        return result
