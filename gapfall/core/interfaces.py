"""
Collaborator Interfaces
=======================

Contracts for everything outside the simulation: drawing, score display,
overlays, and audio. All collaborators are optional; the core skips a call
when the collaborator is missing and treats present ones as infallible.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from gapfall.core.state_snapshot import SessionSnapshot


class LifecycleEvent(str, Enum):
    """Discrete signals for overlays and hints."""
    LOST = "lost"
    WON = "won"
    RESET = "reset"


class RenderSink(Protocol):
    """Consumes one snapshot per frame. No feedback into the core."""

    def __call__(self, snapshot: "SessionSnapshot") -> None:
        ...


class ScoreSink(Protocol):
    """Receives score and target whenever the score changes or resets."""

    def __call__(self, score: int, target: int) -> None:
        ...


class LifecycleSink(Protocol):
    """Receives lost / won / reset signals."""

    def __call__(self, event: LifecycleEvent) -> None:
        ...


class AudioSink(Protocol):
    """Best-effort background audio."""

    @property
    def started(self) -> bool:
        ...

    def try_start(self) -> bool:
        ...

    def toggle_mute(self) -> bool:
        ...


@dataclass
class Collaborators:
    """Bundle of optional collaborators wired into a game."""
    render: Optional[RenderSink] = None
    score: Optional[ScoreSink] = None
    lifecycle: Optional[LifecycleSink] = None
    audio: Optional[AudioSink] = None
