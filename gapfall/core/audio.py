"""
Background Audio
================

Best-effort looping music through pygame.mixer. Starting may fail (no audio
device, mixer not initialised yet, missing file); a failure leaves the sink
"not started" and the next trigger simply tries again. Nothing here ever
reaches the simulation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

logger = logging.getLogger(__name__)


class MixerAudio:
    """
    Audio sink backed by pygame.mixer.music.

    try_start() is idempotent once playback has begun; toggle_mute() only
    flips the volume and reports the new muted state back to the caller.
    """

    def __init__(self, track_path: Optional[Union[str, Path]] = None, volume: float = 0.6):
        """
        Args:
            track_path: Music file to loop. Silent (never starts) if None.
            volume: Playback volume in [0, 1] when unmuted.
        """
        self._track_path = Path(track_path) if track_path is not None else None
        self._volume = max(0.0, min(1.0, volume))
        self._started = False
        self._muted = False
        self._attempts = 0

    @property
    def started(self) -> bool:
        return self._started

    @property
    def muted(self) -> bool:
        return self._muted

    @property
    def attempts(self) -> int:
        """Number of start attempts made so far."""
        return self._attempts

    def try_start(self) -> bool:
        """
        Attempt to begin playback.

        Returns:
            True if audio is playing after the call.
        """
        if self._started:
            return True
        if not PYGAME_AVAILABLE or self._track_path is None:
            return False

        self._attempts += 1
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            pygame.mixer.music.load(str(self._track_path))
            pygame.mixer.music.set_volume(0.0 if self._muted else self._volume)
            pygame.mixer.music.play(loops=-1)
        except pygame.error as e:
            logger.debug("audio start failed (attempt %d): %s", self._attempts, e)
            return False

        self._started = True
        return True

    def toggle_mute(self) -> bool:
        """
        Flip the muted state.

        Returns:
            The new muted state.
        """
        self._muted = not self._muted
        if self._started and PYGAME_AVAILABLE and pygame.mixer.get_init():
            pygame.mixer.music.set_volume(0.0 if self._muted else self._volume)
        return self._muted

    def stop(self) -> None:
        """Stop playback and release the mixer."""
        if self._started and PYGAME_AVAILABLE and pygame.mixer.get_init():
            pygame.mixer.music.stop()
            pygame.mixer.quit()
        self._started = False
