"""
Tests for pass detection, scoring, collision policies, and the boost.
"""

import pytest

from gapfall.core.collision import (
    CollisionEngine, CollisionPolicy, ForgivingPolicy, HardFailPolicy, OUTCOME_FATAL,
    OUTCOME_SKIP, OUTCOME_SUPPRESSED, inside_gap, is_hit
)
from gapfall.core.config_loader import load_config
from gapfall.core.rules import REASON_COLLISION, REASON_TARGET
from gapfall.core.scoring import SOURCE_PASS, SOURCE_SKIP, ScoreTracker
from gapfall.core.session import GameState, Obstacle, new_session


def make_obstacle(x, gap_top=245.0, passed=False):
    return Obstacle(x=x, gap_top=gap_top, gap_height=150.0, width=50.0, passed=passed)


def colliding_obstacle():
    """Overlaps the player at x=80 with the gap well below it."""
    return make_obstacle(70.0, gap_top=400.0)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def extended_config():
    return load_config(variant="extended")


@pytest.fixture
def session(config):
    session = new_session(config, 480, 640)
    session.state = GameState.PLAYING
    return session


@pytest.fixture
def extended_session(extended_config):
    session = new_session(extended_config, 480, 640)
    session.state = GameState.PLAYING
    return session


class TestGeometry:
    """Test hit tests against the player circle's extent."""

    def test_inside_gap_no_hit(self, session):
        obstacle = make_obstacle(70.0, gap_top=245.0)

        assert inside_gap(session.player, obstacle)
        assert not is_hit(session.player, obstacle)

    def test_touching_gap_edge_is_hit(self, session):
        """The extent must be strictly inside the gap."""
        obstacle = make_obstacle(70.0, gap_top=session.player.top)

        assert is_hit(session.player, obstacle)

    def test_no_horizontal_overlap(self, session):
        """Obstacle to the right of the player cannot be hit."""
        obstacle = make_obstacle(96.0, gap_top=400.0)

        assert not is_hit(session.player, obstacle)


class TestPasses:
    """Test pass detection and scoring."""

    def test_cleared_threshold(self, config, session):
        """Cleared once the right edge is left of the player's left edge."""
        scorer = ScoreTracker(config)

        assert scorer.is_cleared(make_obstacle(13.0), session)
        assert not scorer.is_cleared(make_obstacle(14.0), session)

    def test_score_counts_new_passes(self, config, session):
        engine = CollisionEngine(config=config)
        session.obstacles = [make_obstacle(0.0), make_obstacle(10.0), make_obstacle(200.0)]

        result = engine.update_passes(session)

        assert session.score == 2
        assert [e.source for e in result.events] == [SOURCE_PASS, SOURCE_PASS]
        assert [obs.passed for obs in session.obstacles] == [True, True, False]

    def test_each_obstacle_scores_once(self, config, session):
        """Re-running pass detection never credits the same obstacle."""
        engine = CollisionEngine(config=config)
        session.obstacles = [make_obstacle(0.0)]

        engine.update_passes(session)
        result = engine.update_passes(session)

        assert session.score == 1
        assert result.events == []

    def test_target_stops_pass_scan(self, config, session):
        """Reaching the target ends the scan on that obstacle."""
        engine = CollisionEngine(config=config)
        session.score = 24
        session.obstacles = [make_obstacle(0.0), make_obstacle(5.0)]

        result = engine.update_passes(session)

        assert session.score == 25
        assert result.termination.won
        assert result.termination.reason == REASON_TARGET
        assert not session.obstacles[1].passed


class TestHardFail:
    """Test the baseline collision policy."""

    def test_policy_base_is_abstract(self):
        """Policies must implement resolve()."""
        with pytest.raises(TypeError):
            CollisionPolicy()

    def test_hit_is_fatal(self, config, session):
        engine = CollisionEngine(config=config)
        session.obstacles = [colliding_obstacle()]

        result = engine.check_hits(session)

        assert isinstance(engine.policy, HardFailPolicy)
        assert result.outcomes[0].kind == OUTCOME_FATAL
        assert result.termination.lost
        assert result.termination.reason == REASON_COLLISION
        assert session.score == 0

    def test_no_hit_no_outcome(self, config, session):
        engine = CollisionEngine(config=config)
        session.obstacles = [make_obstacle(70.0, gap_top=245.0)]

        result = engine.check_hits(session)

        assert result.outcomes == []
        assert not result.termination.terminal


class TestForgiving:
    """Test skip events under the extended policy."""

    def test_skip_event(self, extended_config, extended_session):
        """Score 3 with four pending obstacles becomes 7."""
        engine = CollisionEngine(config=extended_config)
        culprit = colliding_obstacle()
        extended_session.score = 3
        extended_session.obstacles = [
            culprit, make_obstacle(200.0), make_obstacle(300.0), make_obstacle(400.0)
        ]

        result = engine.check_hits(extended_session)

        assert isinstance(engine.policy, ForgivingPolicy)
        outcome = result.outcomes[0]
        assert outcome.kind == OUTCOME_SKIP
        assert outcome.score_event.points == 4
        assert outcome.score_event.source == SOURCE_SKIP
        assert extended_session.score == 7
        assert all(obs.passed for obs in extended_session.obstacles)
        assert extended_session.collision_cooldown == 900
        assert extended_session.player.velocity == -4.0
        assert not result.termination.terminal

    def test_culprit_moved_offscreen(self, extended_config, extended_session):
        engine = CollisionEngine(config=extended_config)
        culprit = colliding_obstacle()
        extended_session.obstacles = [culprit]

        engine.check_hits(extended_session)

        assert culprit.x == -(50 + 20) - 1

    def test_skip_capped_at_max(self, extended_config, extended_session):
        """Only the first max_skip pending obstacles are credited."""
        engine = CollisionEngine(config=extended_config)
        extended_session.obstacles = [colliding_obstacle()] + [
            make_obstacle(150.0 + 60 * i) for i in range(6)
        ]

        engine.check_hits(extended_session)

        assert extended_session.score == 5
        assert [obs.passed for obs in extended_session.obstacles] == [True] * 5 + [False] * 2

    def test_already_passed_not_recredited(self, extended_config, extended_session):
        engine = CollisionEngine(config=extended_config)
        extended_session.score = 1
        extended_session.obstacles = [
            make_obstacle(0.0, passed=True), colliding_obstacle(), make_obstacle(300.0)
        ]

        engine.check_hits(extended_session)

        assert extended_session.score == 3

    def test_cooldown_suppresses_hit(self, extended_config, extended_session):
        """During the cooldown a hit changes nothing."""
        engine = CollisionEngine(config=extended_config)
        culprit = colliding_obstacle()
        extended_session.obstacles = [culprit]
        extended_session.collision_cooldown = 100.0
        extended_session.player.velocity = 2.0

        result = engine.check_hits(extended_session)

        assert result.outcomes[0].kind == OUTCOME_SUPPRESSED
        assert result.score_events == []
        assert extended_session.score == 0
        assert extended_session.player.velocity == 2.0
        assert extended_session.collision_cooldown == 100.0
        assert culprit.x == 70.0

    def test_skip_can_win(self, extended_config, extended_session):
        engine = CollisionEngine(config=extended_config)
        extended_session.score = 23
        extended_session.obstacles = [colliding_obstacle(), make_obstacle(300.0)]

        result = engine.check_hits(extended_session)

        assert extended_session.score == 25
        assert result.termination.won


class TestBoost:
    """Test the milestone boost window."""

    def test_boost_armed_at_milestone(self, extended_config, extended_session):
        engine = CollisionEngine(config=extended_config)
        extended_session.score = 9
        extended_session.obstacles = [make_obstacle(0.0)]

        result = engine.update_passes(extended_session)

        assert result.boost_armed
        assert extended_session.boost_remaining == 4000
        assert extended_session.boost_granted
        assert extended_session.player.velocity == -4.5

    def test_boost_granted_once(self, extended_config, extended_session):
        engine = CollisionEngine(config=extended_config)
        extended_session.score = 9
        extended_session.boost_granted = True
        extended_session.obstacles = [make_obstacle(0.0)]

        result = engine.update_passes(extended_session)

        assert not result.boost_armed
        assert extended_session.boost_remaining == 0

    def test_skip_never_arms_boost(self, extended_config, extended_session):
        """Points from a skip that land on the milestone do not count."""
        engine = CollisionEngine(config=extended_config)
        extended_session.score = 8
        extended_session.obstacles = [colliding_obstacle(), make_obstacle(300.0)]

        engine.check_hits(extended_session)

        assert extended_session.score == 10
        assert not extended_session.boost_active

    def test_baseline_has_no_boost(self, config, session):
        engine = CollisionEngine(config=config)
        session.score = 9
        session.obstacles = [make_obstacle(0.0)]

        result = engine.update_passes(session)

        assert session.score == 10
        assert not result.boost_armed
        assert not session.boost_active
