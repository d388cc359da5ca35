"""
Human Play Mode
================

Play Gapfall interactively in a pygame window.

Controls:
    - Space / Up / Left click: Jump (first jump starts the run)
    - R or click "Retry": Retry after losing
    - Enter: Play again after winning
    - M: Toggle music (extended variant)
    - ESC: Quit

Usage:
    python -m tools.play_human [--variant extended] [--seed SEED] [--music FILE]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from gapfall.core.audio import MixerAudio
from gapfall.core.config_loader import GameConfig, load_config
from gapfall.core.driver import FrameDriver
from gapfall.core.game import CoreGame
from gapfall.core.interfaces import Collaborators, LifecycleEvent
from gapfall.core.state_snapshot import SessionSnapshot


class PlayRenderer:
    """
    Pygame renderer and UI chrome for human play.

    Acts as the render sink, the score display, and the lifecycle sink.
    """

    def __init__(self, config: GameConfig):
        self._config = config

        self._bg = (255, 214, 226)
        self._veil = (255, 255, 255, 90)
        self._obstacle = (255, 255, 255, 155)
        self._player = (255, 92, 138)
        self._player_cooldown = (255, 170, 195)
        self._boost_ring = (255, 200, 60)
        self._text_dark = (90, 40, 60)
        self._panel = (255, 245, 248)

        pygame.font.init()
        self._font_large = pygame.font.Font(None, 56)
        self._font_medium = pygame.font.Font(None, 32)
        self._font_small = pygame.font.Font(None, 24)

        self._snapshot: Optional[SessionSnapshot] = None
        self._score = 0
        self._target = config.scoring.target_score
        self._show_lost = False
        self._show_won = False
        self._muted = False
        self.retry_rect = pygame.Rect(0, 0, 180, 56)

    # Collaborator entry points

    def __call__(self, snapshot: SessionSnapshot) -> None:
        self._snapshot = snapshot

    def on_score(self, score: int, target: int) -> None:
        self._score = score
        self._target = target

    def on_lifecycle(self, event: LifecycleEvent) -> None:
        if event is LifecycleEvent.LOST:
            self._show_lost = True
        elif event is LifecycleEvent.WON:
            self._show_won = True
        elif event is LifecycleEvent.RESET:
            self._show_lost = False
            self._show_won = False

    def set_muted(self, muted: bool) -> None:
        self._muted = muted

    @property
    def lost_visible(self) -> bool:
        return self._show_lost

    @property
    def won_visible(self) -> bool:
        return self._show_won

    # Drawing

    def draw(self, screen: "pygame.Surface") -> None:
        snapshot = self._snapshot
        width, height = screen.get_size()
        screen.fill(self._bg)

        if snapshot is not None:
            layer = pygame.Surface((width, height), pygame.SRCALPHA)
            layer.fill(self._veil)
            for obs in snapshot.obstacles:
                top = pygame.Rect(int(obs.x), 0, int(obs.width), int(obs.gap_top))
                bottom_y = int(obs.gap_top + obs.gap_height)
                bottom = pygame.Rect(int(obs.x), bottom_y, int(obs.width), height - bottom_y)
                pygame.draw.rect(layer, self._obstacle, top)
                pygame.draw.rect(layer, self._obstacle, bottom)
            screen.blit(layer, (0, 0))

            center = (int(snapshot.player_x), int(snapshot.player_y))
            radius = int(snapshot.player_radius)
            if snapshot.boost_active:
                pygame.draw.circle(screen, self._boost_ring, center, radius + 4, 3)
            color = self._player_cooldown if snapshot.collision_cooldown > 0 else self._player
            pygame.draw.circle(screen, color, center, radius)

            if snapshot.hint_visible:
                hint = self._font_medium.render("Tap or press Space to fly", True, self._text_dark)
                screen.blit(hint, hint.get_rect(center=(width // 2, height // 3)))

        hud = self._font_medium.render(f"{self._score} / {self._target}", True, self._text_dark)
        screen.blit(hud, (14, 12))
        if self._config.boost_enabled:
            music = "music off (M)" if self._muted else "music on (M)"
            label = self._font_small.render(music, True, self._text_dark)
            screen.blit(label, (width - label.get_width() - 14, 16))

        if self._show_lost:
            self._draw_card(screen, "Oops! Try again?", "R")
        elif self._show_won:
            self._draw_card(screen, "You made it!", "Enter")

    def _draw_card(self, screen: "pygame.Surface", title: str, key: str) -> None:
        width, height = screen.get_size()
        card = pygame.Rect(0, 0, min(360, width - 40), 200)
        card.center = (width // 2, height // 2)
        pygame.draw.rect(screen, self._panel, card, border_radius=16)

        text = self._font_large.render(title, True, self._text_dark)
        screen.blit(text, text.get_rect(center=(card.centerx, card.top + 55)))

        self.retry_rect.center = (card.centerx, card.bottom - 55)
        pygame.draw.rect(screen, self._player, self.retry_rect, border_radius=12)
        label = self._font_medium.render(f"Retry ({key})", True, (255, 255, 255))
        screen.blit(label, label.get_rect(center=self.retry_rect.center))


class HumanPlayer:
    """
    Human-playable Gapfall game: pygame events in, driver frames out.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        music_path: Optional[str] = None,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps

        pygame.init()
        self._screen = pygame.display.set_mode(
            (int(config.board.width), int(config.board.height)),
            pygame.RESIZABLE
        )
        pygame.display.set_caption("Gapfall")
        self._clock = pygame.time.Clock()

        self._renderer = PlayRenderer(config)
        self._audio = MixerAudio(music_path) if config.boost_enabled else None

        collaborators = Collaborators(
            render=self._renderer,
            score=self._renderer.on_score,
            lifecycle=self._renderer.on_lifecycle,
            audio=self._audio
        )
        self._game = CoreGame(config=config, seed=seed, collaborators=collaborators)
        self._driver = FrameDriver(self._game)
        self._game.reset()
        self._driver.render_now()

        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns final score."""
        print("=== Gapfall ===")
        print(f"Variant: {self._config.variant}, target: {self._config.scoring.target_score}")
        print("Space / Up / click to jump, R to retry, ESC to quit")
        print()

        while self._running:
            self._handle_events()
            if self._driver.running:
                self._driver.frame()
            self._renderer.draw(self._screen)
            pygame.display.flip()
            self._clock.tick(self._target_fps)

        if self._audio is not None:
            self._audio.stop()
        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.VIDEORESIZE:
                try:
                    self._game.resize(event.w, event.h)
                except ValueError as e:
                    print(f"Resize ignored: {e}")
                    continue
                self._driver.stop()
                self._driver.render_now()

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in (pygame.K_SPACE, pygame.K_UP):
                    self._driver.jump()
                elif event.key == pygame.K_r and self._renderer.lost_visible:
                    self._retry()
                elif event.key == pygame.K_RETURN and self._renderer.won_visible:
                    self._driver.restart()
                    self._driver.render_now()
                    print("\n=== New Game ===\n")
                elif event.key == pygame.K_m and self._audio is not None:
                    self._renderer.set_muted(self._audio.toggle_mute())

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if self._renderer.lost_visible and self._renderer.retry_rect.collidepoint(event.pos):
                    self._retry()
                elif self._renderer.won_visible and self._renderer.retry_rect.collidepoint(event.pos):
                    self._driver.restart()
                    self._driver.render_now()
                else:
                    self._driver.jump()

    def _retry(self) -> None:
        print(f"Score: {self._game.score} ({self._game.termination_reason})")
        self._driver.retry()
        print("\n=== Retry ===\n")


def main():
    parser = argparse.ArgumentParser(description="Play Gapfall interactively")
    parser.add_argument("--variant", type=str, choices=["baseline", "extended"], default=None,
                        help="Game variant (default: from config file)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--music", type=str, default=None, help="Music file (extended variant)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")

    args = parser.parse_args()

    try:
        config = load_config(args.config, variant=args.variant)
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            music_path=args.music,
            target_fps=args.fps
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
