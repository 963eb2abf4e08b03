"""
Human Play Mode
================

Play Drop Catch interactively in a pygame window.

Controls:
    - A / Left arrow: Move catcher left
    - D / Right arrow: Move catcher right
    - Click: Step catcher toward the click
    - R: Restart game
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from drop_catch.catch_core.config_loader import load_config, GameConfig
from drop_catch.catch_core.game_loop import GameLoop
from drop_catch.catch_core.state_snapshot import GameSnapshot


class CatchRenderer:
    """Draws snapshots: sky gradient, falling objects, catcher and HUD."""

    def __init__(self, config: GameConfig, window_width: int, window_height: int):
        self._config = config
        self._window_width = window_width
        self._window_height = window_height

        self._bg_top = (135, 206, 235)
        self._bg_bottom = (224, 246, 255)
        self._catcher_color = (139, 90, 43)
        self._text_dark = (40, 40, 60)
        self._banner_color = (255, 215, 0)
        self._colors = {obj.name: obj.color for obj in config.objects}

        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 56)
        self._font_large = pygame.font.Font(None, 36)
        self._font_small = pygame.font.Font(None, 22)

        self._hud_height = 50
        self._field_height = window_height - self._hud_height
        self._sx = window_width / config.board.width
        self._sy = self._field_height / config.board.height

        self._bg_surface = self._create_gradient_background()

    def _create_gradient_background(self) -> pygame.Surface:
        surface = pygame.Surface((self._window_width, self._window_height))
        for y in range(self._window_height):
            t = y / self._window_height
            color = tuple(
                int(top * (1 - t) + bottom * t)
                for top, bottom in zip(self._bg_top, self._bg_bottom)
            )
            pygame.draw.line(surface, color, (0, y), (self._window_width, y))
        return surface

    def to_screen_x(self, x: float) -> int:
        return int(x * self._sx)

    def to_screen_y(self, y: float) -> int:
        return int(self._hud_height + y * self._sy)

    def screen_to_board_x(self, screen_x: int) -> float:
        return screen_x / self._sx

    def render(
        self,
        screen: pygame.Surface,
        snapshot: GameSnapshot,
        banner: Optional[str] = None
    ) -> None:
        board = self._config.board
        screen.blit(self._bg_surface, (0, 0))

        half_w = board.object_width / 2
        half_h = board.object_height / 2
        for view in snapshot.objects:
            rect = pygame.Rect(
                self.to_screen_x(view.x - half_w),
                self.to_screen_y(view.y - half_h),
                max(1, int(board.object_width * self._sx)),
                max(1, int(board.object_height * self._sy)),
            )
            pygame.draw.ellipse(screen, self._colors[view.object_class.value], rect)

        catcher_rect = pygame.Rect(
            self.to_screen_x(snapshot.catcher_x),
            self.to_screen_y(board.catcher_top),
            int(snapshot.catcher_width * self._sx),
            int(board.catcher_height * self._sy),
        )
        pygame.draw.rect(screen, self._catcher_color, catcher_rect, border_radius=6)

        self._draw_hud(screen, snapshot)

        if banner and not snapshot.game_over:
            text = self._font_large.render(banner, True, self._banner_color)
            screen.blit(text, ((self._window_width - text.get_width()) // 2,
                               self._window_height // 2 - text.get_height() // 2))

        if snapshot.game_over:
            self._draw_game_over(screen, snapshot)

    def _draw_hud(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        pygame.draw.rect(screen, (255, 255, 255), (0, 0, self._window_width, self._hud_height))
        hud = f"Score: {snapshot.score}    Lives: {snapshot.lives}    Level: {snapshot.level}"
        text = self._font_large.render(hud, True, self._text_dark)
        screen.blit(text, (15, (self._hud_height - text.get_height()) // 2))

    def _draw_game_over(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))

        lines = [
            (self._font_huge, "GAME OVER"),
            (self._font_large, f"Final Score: {snapshot.final_score}"),
            (self._font_large, f"Level Reached: {snapshot.final_level}"),
            (self._font_small, "Press R to restart"),
        ]
        y = self._window_height // 2 - 90
        for font, line in lines:
            text = font.render(line, True, (255, 255, 255))
            screen.blit(text, ((self._window_width - text.get_width()) // 2, y))
            y += text.get_height() + 14


class HumanPlayer:
    """Keyboard/mouse driver for a real-time GameLoop."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        window_width: int = 480,
        window_height: int = 640,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps
        self._last_snapshot: Optional[GameSnapshot] = None

        self._game = GameLoop(config=config, seed=seed, render_callback=self._on_snapshot)

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height))
        pygame.display.set_caption("Drop Catch")
        self._clock = pygame.time.Clock()
        self._renderer = CatchRenderer(config, window_width, window_height)

        self._running = True
        self._banner: Optional[str] = None
        self._banner_until = 0.0

        self._game.start()

    def _on_snapshot(self, snapshot: GameSnapshot) -> None:
        self._last_snapshot = snapshot

    def run(self) -> int:
        """Run the window loop. Returns final score."""
        print("=== Drop Catch ===")
        print("A/D or arrows to move, click to step toward the pointer")
        print("R to restart, ESC to quit")
        print()

        while self._running:
            self._handle_events()

            result = self._game.advance()
            if result.delta_score > 0:
                print(f"  +{result.delta_score} (Total: {self._game.score})")
            if result.delta_lives < 0:
                print(f"  Ouch! Lives: {self._game.lives}")
            if result.leveled_up:
                self._banner = f"Level {self._game.level}!"
                self._banner_until = time.time() + 2.0
            if result.game_over:
                print(f"\nGAME OVER - Score: {self._game.state.final_score}, "
                      f"Level: {self._game.state.final_level}")

            if self._banner and time.time() >= self._banner_until:
                self._banner = None

            self._render()
            self._clock.tick(self._target_fps)

        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Map pygame events to catcher commands."""
        key_step = self._config.input.key_step
        pointer_step = self._config.input.pointer_step

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._restart()
                elif event.key in (pygame.K_a, pygame.K_LEFT):
                    self._game.move_catcher(-key_step)
                elif event.key in (pygame.K_d, pygame.K_RIGHT):
                    self._game.move_catcher(key_step)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                click_x = self._renderer.screen_to_board_x(event.pos[0])
                if click_x < self._game.catcher.x:
                    self._game.move_catcher(-pointer_step)
                else:
                    self._game.move_catcher(pointer_step)

    def _restart(self) -> None:
        self._game.restart()
        self._banner = None
        print("\n=== Game Restarted ===\n")

    def _render(self) -> None:
        snapshot = self._last_snapshot or self._game.snapshot()
        self._renderer.render(self._screen, snapshot, banner=self._banner)
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Drop Catch interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=480, help="Window width (default: 480)")
    parser.add_argument("--height", type=int, default=640, help="Window height (default: 640)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
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
