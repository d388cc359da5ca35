"""
Tests for the CoreGame state machine and tick ordering.
"""

import os

import pytest
import yaml

import gapfall
from gapfall.core.config_loader import build_config, load_config
from gapfall.core.game import CoreGame
from gapfall.core.interfaces import Collaborators, LifecycleEvent
from gapfall.core.rng import SequenceSource
from gapfall.core.session import GameState, Obstacle

FRAME_MS = 16.667


class Recorder:
    """Collects score and lifecycle notifications."""

    def __init__(self):
        self.scores = []
        self.events = []

    def on_score(self, score, target):
        self.scores.append((score, target))

    def on_lifecycle(self, event):
        self.events.append(event)


class FakeAudio:
    def __init__(self, succeed=False):
        self.succeed = succeed
        self.started = False
        self.calls = 0

    def try_start(self):
        self.calls += 1
        self.started = self.succeed
        return self.started

    def toggle_mute(self):
        return False


def colliding_obstacle():
    # Scrolls to x=70 on the next tick, overlapping the player with the gap below
    return Obstacle(x=72.2, gap_top=400.0, gap_height=150.0, width=50.0)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def extended_config():
    return load_config(variant="extended")


@pytest.fixture
def single_skip_config():
    """Extended variant that credits only one obstacle per skip."""
    path = os.path.join(os.path.dirname(gapfall.__file__), "game_config.yaml")
    with open(path, "r") as f:
        raw = yaml.safe_load(f)
    raw["collision"]["max_skip"] = 1
    return build_config(raw, variant="extended")


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def game(config, recorder):
    return CoreGame(
        config=config,
        seed=42,
        collaborators=Collaborators(score=recorder.on_score, lifecycle=recorder.on_lifecycle)
    )


class TestIdle:
    """Test the initial IDLE state."""

    def test_initial_state(self, game):
        assert game.state is GameState.IDLE
        assert game.score == 0
        assert game.target_score == 25
        assert game.session.hint_visible
        assert game.session.player.y == 320
        assert game.session.player.velocity == 0

    def test_tick_ignored_while_idle(self, game):
        """No physics runs before the first jump."""
        result = game.tick(FRAME_MS)

        assert result.state is GameState.IDLE
        assert game.session.ticks == 0
        assert game.session.player.y == 320

    def test_first_jump_starts(self, game):
        assert game.jump()

        assert game.state is GameState.PLAYING
        assert game.session.player.velocity == -6.5
        assert not game.session.hint_visible


class TestTick:
    """Test the per-tick update order."""

    def test_physics_after_jump(self, game):
        game.jump()

        game.tick(FRAME_MS)

        assert game.session.player.velocity == pytest.approx(-6.15)
        assert game.session.player.y == pytest.approx(320 - 6.15)

    def test_first_spawn(self, config):
        """Obstacles appear once the spawn interval is exceeded."""
        game = CoreGame(config=config, rng=SequenceSource([0.5]))
        game.jump()

        result = game.tick(1301.0)

        assert result.spawned is not None
        # Spawned and scrolled in the same tick
        assert result.spawned.x == pytest.approx(500 - 2.2)
        assert result.spawned.gap_top == pytest.approx(245.0)

    def test_pass_scores(self, game, recorder):
        game.jump()
        game.session.obstacles.append(
            Obstacle(x=15.0, gap_top=245.0, gap_height=150.0, width=50.0)
        )

        result = game.tick(FRAME_MS)

        assert result.delta_score == 1
        assert game.score == 1
        assert recorder.scores[-1] == (1, 25)

    def test_deterministic_with_seed(self, config):
        """Same seed and inputs give identical snapshots."""
        snapshots = []
        for _ in range(2):
            game = CoreGame(config=config, seed=123)
            game.jump()
            for i in range(120):
                if i % 12 == 0:
                    game.jump()
                game.tick(FRAME_MS)
            snapshots.append(game.snapshot())

        assert snapshots[0] == snapshots[1]


class TestLost:
    """Test transitions into LOST."""

    def test_fall_out_of_bounds(self, game, recorder):
        game.jump()
        for _ in range(200):
            game.tick(FRAME_MS)
            if game.is_over:
                break

        assert game.state is GameState.LOST
        assert game.termination_reason == "out_of_bounds"
        assert game.session.player.bottom > 640
        assert recorder.events.count(LifecycleEvent.LOST) == 1

    def test_fly_out_of_top(self, game):
        game.jump()
        for _ in range(200):
            game.jump()
            game.tick(FRAME_MS)
            if game.is_over:
                break

        assert game.state is GameState.LOST
        assert game.termination_reason == "out_of_bounds"

    def test_hard_fail_collision(self, game):
        game.jump()
        game.session.obstacles.append(colliding_obstacle())

        result = game.tick(FRAME_MS)

        assert result.lost
        assert game.termination_reason == "collision"

    def test_lost_is_frozen(self, game, recorder):
        """Ticks and jumps do nothing once lost."""
        game.jump()
        game.session.obstacles.append(colliding_obstacle())
        game.tick(FRAME_MS)
        before = game.snapshot()

        assert not game.jump()
        result = game.tick(FRAME_MS)

        assert result.delta_score == 0
        assert game.snapshot() == before
        assert recorder.events.count(LifecycleEvent.LOST) == 1


class TestWon:
    """Test transitions into WON."""

    def test_reaching_target_wins(self, game, recorder):
        game.jump()
        game.session.score = 24
        game.session.obstacles.append(
            Obstacle(x=15.0, gap_top=245.0, gap_height=150.0, width=50.0)
        )

        result = game.tick(FRAME_MS)

        assert result.won
        assert game.score == 25
        assert game.termination_reason == "target_reached"
        assert recorder.events.count(LifecycleEvent.WON) == 1

    def test_win_ends_tick(self, game):
        """A collision later in the same tick cannot turn a win into a loss."""
        game.jump()
        game.session.score = 24
        game.session.obstacles.extend([
            Obstacle(x=15.0, gap_top=245.0, gap_height=150.0, width=50.0),
            colliding_obstacle(),
        ])

        game.tick(FRAME_MS)

        assert game.state is GameState.WON

    def test_won_is_terminal(self, game, recorder):
        game.jump()
        game.session.score = 24
        game.session.obstacles.append(
            Obstacle(x=15.0, gap_top=245.0, gap_height=150.0, width=50.0)
        )
        game.tick(FRAME_MS)

        for _ in range(5):
            game.tick(FRAME_MS)

        assert game.state is GameState.WON
        assert game.score == 25
        assert recorder.events.count(LifecycleEvent.WON) == 1


class TestForgivingSession:
    """Test the extended variant through full ticks."""

    def test_hit_becomes_skip(self, extended_config):
        game = CoreGame(config=extended_config, seed=1)
        game.jump()
        game.session.obstacles.append(colliding_obstacle())

        result = game.tick(FRAME_MS)

        assert game.state is GameState.PLAYING
        assert result.delta_score == 1
        assert game.session.collision_cooldown == 900
        assert game.session.player.velocity == -4.0

    def test_cooldown_counts_down(self, extended_config):
        """Timers run at the start of the next tick."""
        game = CoreGame(config=extended_config, seed=1)
        game.jump()
        game.session.obstacles.append(colliding_obstacle())
        game.tick(FRAME_MS)

        game.tick(100.0)

        assert game.session.collision_cooldown == pytest.approx(800.0)

    def test_skipped_culprit_never_scores(self, single_skip_config):
        """A teleported obstacle left unpassed by the skip is gone before the next pass scan."""
        game = CoreGame(config=single_skip_config, seed=1)
        game.jump()
        # Both overlap the player after scrolling; only the second misses its gap
        safe = Obstacle(x=72.2, gap_top=245.0, gap_height=150.0, width=50.0)
        culprit = Obstacle(x=52.2, gap_top=400.0, gap_height=150.0, width=50.0)
        game.session.obstacles.extend([safe, culprit])

        first = game.tick(FRAME_MS)

        assert first.delta_score == 1
        assert safe.passed
        assert not culprit.passed
        assert game.session.obstacles == [safe]

        for _ in range(5):
            game.tick(FRAME_MS)

        assert game.score == 1
        assert not culprit.passed

    def test_out_of_bounds_never_forgiven(self, extended_config):
        game = CoreGame(config=extended_config, seed=1)
        game.jump()
        for _ in range(200):
            game.tick(FRAME_MS)
            if game.is_over:
                break

        assert game.state is GameState.LOST
        assert game.termination_reason == "out_of_bounds"


class TestResetRetryRestart:
    """Test session resets."""

    def test_reset_idempotent(self, game):
        first = game.reset()
        second = game.reset()

        assert first == second
        assert first.state is GameState.IDLE

    def test_reset_notifies(self, game, recorder):
        game.reset()

        assert recorder.scores[-1] == (0, 25)
        assert recorder.events[-1] is LifecycleEvent.RESET

    def test_retry_after_loss(self, game):
        game.jump()
        game.session.obstacles.append(colliding_obstacle())
        game.tick(FRAME_MS)

        snapshot = game.retry()

        assert snapshot.state is GameState.PLAYING
        assert snapshot.score == 0
        assert snapshot.obstacles == ()
        assert snapshot.player_y == 320
        assert snapshot.player_velocity == 0
        assert game.termination_reason == ""

    def test_retry_keeps_hint_until_jump(self, game):
        game.retry()

        assert game.session.hint_visible
        game.jump()
        assert not game.session.hint_visible

    def test_restart_goes_idle(self, game):
        game.jump()
        game.session.score = 24
        game.session.obstacles.append(
            Obstacle(x=15.0, gap_top=245.0, gap_height=150.0, width=50.0)
        )
        game.tick(FRAME_MS)

        snapshot = game.restart()

        assert snapshot.state is GameState.IDLE
        assert snapshot.score == 0


class TestResize:
    """Test play area changes."""

    def test_resize_resets(self, game):
        game.jump()
        game.tick(FRAME_MS)

        snapshot = game.resize(600, 800)

        assert snapshot.state is GameState.IDLE
        assert snapshot.area_width == 600
        assert snapshot.area_height == 800
        assert snapshot.player_y == 400

    def test_resize_too_small(self, game):
        with pytest.raises(ValueError):
            game.resize(600, 200)


class TestCollaborators:
    """Test optional collaborator wiring."""

    def test_no_collaborators(self, config):
        """A bare game runs without any sinks."""
        game = CoreGame(config=config, seed=3)
        game.jump()

        for _ in range(10):
            game.tick(FRAME_MS)

        assert game.session.ticks == 10

    def test_audio_retried_until_started(self, config):
        audio = FakeAudio(succeed=False)
        game = CoreGame(config=config, collaborators=Collaborators(audio=audio))

        game.jump()
        game.jump()

        assert audio.calls == 2
        assert game.state is GameState.PLAYING

    def test_audio_started_once(self, config):
        audio = FakeAudio(succeed=True)
        game = CoreGame(config=config, collaborators=Collaborators(audio=audio))

        game.jump()
        game.jump()

        assert audio.calls == 1

    def test_get_info(self, game):
        game.jump()
        game.tick(FRAME_MS)

        info = game.get_info()

        assert info["state"] == "playing"
        assert info["score"] == 0
        assert info["target_score"] == 25
        assert info["ticks"] == 1
        assert info["terminated_reason"] == ""
