"""
Frame Driver
============

Turns host frame callbacks into simulation ticks. Each frame reads a
monotonic timestamp, ticks the game by the elapsed delta, and hands a
snapshot to the render sink. The driver reports whether another frame
should be scheduled; it stops as soon as the session is not playing and
resumes only on an explicit trigger (first jump, retry).
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from gapfall.core.game import CoreGame
from gapfall.core.session import GameState
from gapfall.core.state_snapshot import SessionSnapshot


def monotonic_ms() -> float:
    """Default clock: monotonic milliseconds."""
    return time.perf_counter() * 1000.0


class FrameDriver:
    """
    Thin per-frame loop around CoreGame.tick().
    """

    def __init__(
        self,
        game: CoreGame,
        clock: Optional[Callable[[], float]] = None,
        max_delta_ms: Optional[float] = None
    ):
        """
        Initialize driver.

        Args:
            game: Game to drive.
            clock: Millisecond timestamp source. Uses perf_counter if None.
            max_delta_ms: Clamp for a single frame delta. Uses the config
                value if None (which may itself be None for no clamp).
        """
        self._game = game
        self._clock = clock if clock is not None else monotonic_ms
        if max_delta_ms is None:
            max_delta_ms = game.config.driver.max_delta_ms
        self._max_delta_ms = max_delta_ms
        self._last_time: Optional[float] = None
        self._frames = 0

    @property
    def game(self) -> CoreGame:
        return self._game

    @property
    def running(self) -> bool:
        """True while frames should keep being scheduled."""
        return self._last_time is not None and self._game.is_playing

    @property
    def frames(self) -> int:
        """Frames processed since construction."""
        return self._frames

    def resume(self, timestamp_ms: Optional[float] = None) -> None:
        """Restart the frame clock so the next delta is measured from now."""
        self._last_time = timestamp_ms if timestamp_ms is not None else self._clock()

    def frame(self, timestamp_ms: Optional[float] = None) -> bool:
        """
        Process one frame.

        Args:
            timestamp_ms: Frame timestamp. Read from the clock if None.

        Returns:
            True if the next frame should be scheduled.
        """
        if not self._game.is_playing:
            self._last_time = None
            return False

        now = timestamp_ms if timestamp_ms is not None else self._clock()
        if self._last_time is None:
            self._last_time = now

        delta = now - self._last_time
        self._last_time = now
        if self._max_delta_ms is not None and delta > self._max_delta_ms:
            delta = self._max_delta_ms

        result = self._game.tick(delta)
        self._frames += 1
        self._render(result.snapshot)

        if not self._game.is_playing:
            self._last_time = None
            return False
        return True

    def _render(self, snapshot: SessionSnapshot) -> None:
        sink = self._game.collaborators.render
        if sink is not None:
            sink(snapshot)

    def render_now(self) -> None:
        """Push the current state to the render sink outside the loop."""
        self._render(self._game.snapshot())

    # ------------------------------------------------------------------
    # External triggers
    # ------------------------------------------------------------------

    def jump(self, timestamp_ms: Optional[float] = None) -> bool:
        """
        Forward the input trigger; starts the loop on the first jump.

        Returns:
            True if the jump was applied.
        """
        was_idle = self._game.state is GameState.IDLE
        applied = self._game.jump()
        if applied and was_idle:
            self.resume(timestamp_ms)
        return applied

    def retry(self, timestamp_ms: Optional[float] = None) -> SessionSnapshot:
        """Full session reset and loop resume."""
        snapshot = self._game.retry()
        self.resume(timestamp_ms)
        return snapshot

    def stop(self) -> None:
        """Stop scheduling frames without touching the session."""
        self._last_time = None

    def restart(self) -> SessionSnapshot:
        """Reset to IDLE; the loop waits for the next jump."""
        self.stop()
        return self._game.restart()

    def run_frames(self, count: int, frame_ms: Optional[float] = None) -> int:
        """
        Drive up to count frames at a fixed cadence without a real clock.

        Returns:
            Number of frames processed before the loop stopped.
        """
        if frame_ms is None:
            frame_ms = self._game.config.driver.frame_ms
        processed = 0
        for _ in range(count):
            if not self._game.is_playing:
                break
            if self._last_time is None:
                self.resume(0.0)
            processed += 1
            if not self.frame(self._last_time + frame_ms):
                break
        return processed
