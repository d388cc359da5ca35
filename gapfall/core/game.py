"""
Core Game
=========

Main game orchestrator: owns the session and its state machine, and runs
one simulation tick at a time.

    IDLE --jump--> PLAYING --target--> WON
                   PLAYING --bounds / fatal hit--> LOST --retry--> PLAYING
    WON --restart--> IDLE
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gapfall.core.collision import CollisionEngine, CollisionOutcome, OUTCOME_SKIP
from gapfall.core.config_loader import GameConfig, get_config
from gapfall.core.interfaces import Collaborators, LifecycleEvent
from gapfall.core.obstacles import ObstacleGenerator
from gapfall.core.physics import PhysicsIntegrator
from gapfall.core.rng import GapSampler, RandomSource
from gapfall.core.rules import GameRules, TerminationResult
from gapfall.core.scoring import ScoreEvent, ScoreTracker
from gapfall.core.session import GameState, Obstacle, Session, new_session
from gapfall.core.state_snapshot import SessionSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Result of a single simulation tick."""
    snapshot: SessionSnapshot
    state: GameState
    delta_score: int
    score_events: List[ScoreEvent] = field(default_factory=list)
    collisions: List[CollisionOutcome] = field(default_factory=list)
    spawned: Optional[Obstacle] = None
    boost_armed: bool = False
    termination_reason: str = ""

    @property
    def lost(self) -> bool:
        return self.state is GameState.LOST

    @property
    def won(self) -> bool:
        return self.state is GameState.WON


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Obstacle generator (spawn, prune)
    - Physics integrator
    - Collision & scoring engine
    - Termination, timer, and boost rules
    - Snapshots and collaborator notifications

    One tick = timers, physics, spawn, scroll, passes, prune, bounds, hits
    (and a second prune when a skip event teleported an obstacle).
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[RandomSource] = None,
        collaborators: Optional[Collaborators] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for gap placement.
            rng: Custom random source. Overrides seed if given.
            collaborators: Optional sinks for score, lifecycle, and audio.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._collaborators = collaborators if collaborators is not None else Collaborators()

        # Play area (layout-owned, only read here)
        self._area_width = config.board.width
        self._area_height = config.board.height

        # Initialize subsystems
        self._physics = PhysicsIntegrator(config)
        self._generator = ObstacleGenerator(
            config,
            rng if rng is not None else GapSampler(seed)
        )
        self._scorer = ScoreTracker(config)
        self._rules = GameRules(config)
        self._engine = CollisionEngine(
            config=config,
            scorer=self._scorer,
            rules=self._rules,
            generator=self._generator
        )
        self._snapshot_builder = SnapshotBuilder(config)

        self._session: Session = new_session(config, self._area_width, self._area_height)
        self._termination_reason: str = ""

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def session(self) -> Session:
        """The live session aggregate."""
        return self._session

    @property
    def collaborators(self) -> Collaborators:
        return self._collaborators

    @collaborators.setter
    def collaborators(self, value: Collaborators) -> None:
        self._collaborators = value

    @property
    def state(self) -> GameState:
        return self._session.state

    @property
    def score(self) -> int:
        """Current score."""
        return self._session.score

    @property
    def target_score(self) -> int:
        return self._scorer.target

    @property
    def is_playing(self) -> bool:
        return self._session.is_playing

    @property
    def is_over(self) -> bool:
        """True if the session ended in LOST or WON."""
        return self._session.is_over

    @property
    def termination_reason(self) -> str:
        """Reason for game end, or empty string."""
        return self._termination_reason

    def snapshot(self) -> SessionSnapshot:
        return self._snapshot_builder.build(self._session)

    # ------------------------------------------------------------------
    # Collaborator notifications (skipped when the collaborator is absent)
    # ------------------------------------------------------------------

    def _notify_score(self) -> None:
        sink = self._collaborators.score
        if sink is not None:
            sink(self._session.score, self._scorer.target)

    def _notify_lifecycle(self, event: LifecycleEvent) -> None:
        sink = self._collaborators.lifecycle
        if sink is not None:
            sink(event)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def reset(self, seed: Optional[int] = None) -> SessionSnapshot:
        """
        Reset to a fresh IDLE session.

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            Initial session snapshot.
        """
        if seed is not None:
            self._seed = seed

        self._generator.reset(self._seed)
        self._session = new_session(self._config, self._area_width, self._area_height)
        self._termination_reason = ""

        self._notify_score()
        self._notify_lifecycle(LifecycleEvent.RESET)
        return self.snapshot()

    def jump(self) -> bool:
        """
        Apply the player's only control.

        Starts the session from IDLE. Ignored once the session is over.

        Returns:
            True if the jump was applied.
        """
        session = self._session
        if session.state is GameState.IDLE:
            session.state = GameState.PLAYING
            logger.debug("session started")
        elif session.state is not GameState.PLAYING:
            return False

        self._physics.jump(session)
        session.hint_visible = False

        audio = self._collaborators.audio
        if audio is not None and not audio.started:
            audio.try_start()
        return True

    def retry(self, seed: Optional[int] = None) -> SessionSnapshot:
        """Full reset, then resume PLAYING immediately."""
        self.reset(seed)
        self._session.state = GameState.PLAYING
        logger.debug("session retried")
        return self.snapshot()

    def restart(self, seed: Optional[int] = None) -> SessionSnapshot:
        """Full reset back to IDLE, waiting for the first jump."""
        return self.reset(seed)

    def resize(self, width: float, height: float) -> SessionSnapshot:
        """
        Adopt a new play area size and reset the session.

        Raises:
            ValueError: If the area cannot hold a gap within its margins.
        """
        min_height = self._config.obstacles.gap_height + 2 * self._config.obstacles.min_gap_margin
        if width <= 0 or height < min_height:
            raise ValueError(
                f"Play area {width}x{height} too small (min height {min_height})"
            )
        self._area_width = float(width)
        self._area_height = float(height)
        return self.reset()

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def tick(self, delta_ms: float) -> TickResult:
        """
        Advance the simulation by one frame.

        Args:
            delta_ms: Milliseconds since the previous frame.

        Returns:
            TickResult with the new snapshot and what happened.
        """
        session = self._session
        if not session.is_playing:
            return TickResult(
                snapshot=self.snapshot(),
                state=session.state,
                delta_score=0,
                termination_reason=self._termination_reason
            )

        score_before = session.score
        session.ticks += 1

        self._rules.timers.countdown(session, delta_ms)
        self._physics.step_player(session)
        spawned = self._generator.update(session, delta_ms)
        self._physics.scroll_obstacles(session)

        score_events: List[ScoreEvent] = []
        collisions: List[CollisionOutcome] = []

        passes = self._engine.update_passes(session)
        score_events.extend(passes.events)
        for _ in passes.events:
            self._notify_score()

        termination = passes.termination
        if not termination.terminal:
            self._generator.prune(session)
            termination = self._rules.termination.check_bounds(session)

        if not termination.terminal:
            hits = self._engine.check_hits(session)
            collisions.extend(hits.outcomes)
            score_events.extend(hits.score_events)
            for _ in hits.score_events:
                self._notify_score()
            termination = hits.termination
            # Skip culprits sit at offscreen_x; drop them before the next pass scan
            if any(o.kind == OUTCOME_SKIP for o in hits.outcomes):
                self._generator.prune(session)

        if termination.terminal:
            self._finish(termination)

        return TickResult(
            snapshot=self.snapshot(),
            state=session.state,
            delta_score=session.score - score_before,
            score_events=score_events,
            collisions=collisions,
            spawned=spawned,
            boost_armed=passes.boost_armed,
            termination_reason=self._termination_reason
        )

    def _finish(self, termination: TerminationResult) -> None:
        """Apply a terminal transition exactly once."""
        session = self._session
        self._termination_reason = termination.reason
        if termination.won:
            session.state = GameState.WON
            logger.debug("session won: score=%d ticks=%d", session.score, session.ticks)
            self._notify_lifecycle(LifecycleEvent.WON)
        else:
            session.state = GameState.LOST
            logger.debug(
                "session lost (%s): score=%d ticks=%d",
                termination.reason, session.score, session.ticks
            )
            self._notify_lifecycle(LifecycleEvent.LOST)

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        session = self._session
        return {
            "score": session.score,
            "target_score": self._scorer.target,
            "state": session.state.value,
            "ticks": session.ticks,
            "obstacles": len(session.obstacles),
            "boost_remaining": session.boost_remaining,
            "collision_cooldown": session.collision_cooldown,
            "terminated_reason": self._termination_reason,
        }
