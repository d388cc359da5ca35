"""
Solid Renderer
==============

Fast numpy-based renderer that draws the playfield as flat shapes:
obstacle columns as rectangles and the player as a filled circle.
Usable as a render sink (call it with a snapshot) or to produce
rgb_array frames for the Gymnasium environment.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from gapfall.core.config_loader import GameConfig, get_config
from gapfall.core.state_snapshot import SessionSnapshot


class SolidRenderer:
    """
    Renders a session snapshot to an RGB array.

    Screen coordinates match world coordinates (y grows downward); the
    snapshot's play area is scaled to the requested image size.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize renderer.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config

        self._bg_color = np.array([255, 228, 236], dtype=np.uint8)
        self._obstacle_color = np.array([255, 255, 255], dtype=np.uint8)
        self._player_color = np.array([255, 92, 138], dtype=np.uint8)
        self._player_cooldown_color = np.array([255, 180, 200], dtype=np.uint8)
        self._boost_ring_color = np.array([255, 200, 60], dtype=np.uint8)

        self._last_frame: Optional[np.ndarray] = None

    @property
    def last_frame(self) -> Optional[np.ndarray]:
        """Most recent frame produced through __call__."""
        return self._last_frame

    def __call__(self, snapshot: SessionSnapshot) -> None:
        """Render sink entry point: draw at native play area size."""
        self._last_frame = self.render(
            snapshot,
            int(snapshot.area_width),
            int(snapshot.area_height)
        )

    def render(
        self,
        snapshot: SessionSnapshot,
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render the session to an RGB array.

        Args:
            snapshot: Session snapshot.
            width: Output image width.
            height: Output image height.

        Returns:
            (height, width, 3) uint8 array.
        """
        img = np.empty((height, width, 3), dtype=np.uint8)
        img[:] = self._bg_color

        scale_x = width / snapshot.area_width
        scale_y = height / snapshot.area_height

        for obstacle in snapshot.obstacles:
            x0 = int(round(obstacle.x * scale_x))
            x1 = int(round((obstacle.x + obstacle.width) * scale_x))
            gap_top = int(round(obstacle.gap_top * scale_y))
            gap_bottom = int(round((obstacle.gap_top + obstacle.gap_height) * scale_y))
            self._fill_rect(img, x0, 0, x1, gap_top, self._obstacle_color)
            self._fill_rect(img, x0, gap_bottom, x1, height, self._obstacle_color)

        cx = int(round(snapshot.player_x * scale_x))
        cy = int(round(snapshot.player_y * scale_y))
        radius = max(1, int(round(snapshot.player_radius * min(scale_x, scale_y))))

        if snapshot.boost_active:
            self._draw_circle(img, cx, cy, radius + 3, self._boost_ring_color)

        color = self._player_cooldown_color if snapshot.collision_cooldown > 0 else self._player_color
        self._draw_circle(img, cx, cy, radius, color)

        return img

    def _fill_rect(
        self,
        img: np.ndarray,
        x0: int,
        y0: int,
        x1: int,
        y1: int,
        color: np.ndarray
    ) -> None:
        """Fill the clipped rectangle [x0, x1) x [y0, y1)."""
        height, width = img.shape[:2]
        x0, x1 = max(0, x0), min(width, x1)
        y0, y1 = max(0, y0), min(height, y1)
        if x0 >= x1 or y0 >= y1:
            return
        img[y0:y1, x0:x1] = color

    def _draw_circle(
        self,
        img: np.ndarray,
        cx: int,
        cy: int,
        radius: int,
        color: np.ndarray
    ) -> None:
        """Draw a filled circle using numpy."""
        height, width = img.shape[:2]

        y_min = max(0, cy - radius)
        y_max = min(height, cy + radius + 1)
        x_min = max(0, cx - radius)
        x_max = min(width, cx + radius + 1)

        if y_min >= y_max or x_min >= x_max:
            return

        y_coords = np.arange(y_min, y_max)
        x_coords = np.arange(x_min, x_max)
        yy, xx = np.meshgrid(y_coords, x_coords, indexing='ij')

        mask = (xx - cx)**2 + (yy - cy)**2 <= radius**2
        img[y_min:y_max, x_min:x_max][mask] = color

    def close(self) -> None:
        """Clean up resources (no-op for solid renderer)."""
        self._last_frame = None
