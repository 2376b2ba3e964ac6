"""
Pygame Renderer
===============

Draws a RenderSnapshot with pygame primitives. Supports both display mode
(human play) and headless RGB output.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

import numpy as np

from flapgate.flap_core.config_loader import GameConfig, get_config
from flapgate.flap_core.state_snapshot import AvatarView, ObstacleView, RenderSnapshot


class PygameRenderer:
    """
    Renderer for the play-field, avatar, obstacles and score overlay.

    The renderer only reads snapshots; it never touches the live game.
    """

    def __init__(self, config: Optional[GameConfig] = None, scale: Optional[float] = None):
        """
        Initialize renderer.

        Args:
            config: Game configuration.
            scale: Window pixels per play-field pixel. Uses config if None.
        """
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for PygameRenderer")

        if config is None:
            config = get_config()

        self._config = config
        self._scale = scale if scale is not None else config.render.scale
        self._width = config.playfield.width
        self._height = config.playfield.height

        if not pygame.get_init():
            pygame.init()

        # Display surface (created on demand)
        self._screen: Optional[pygame.Surface] = None

        pygame.font.init()
        self._font = pygame.font.Font(None, 28)
        self._font_large = pygame.font.Font(None, 48)
        self._font_small = pygame.font.Font(None, 20)

        colors = config.render
        self._sky_top = colors.color("sky_top")
        self._sky_bottom = colors.color("sky_bottom")
        self._ground = colors.color("ground")
        self._ground_shadow = colors.color("ground_shadow")
        self._pipe = colors.color("pipe")
        self._pipe_shadow = colors.color("pipe_shadow")
        self._bird = colors.color("bird")
        self._bird_wing = colors.color("bird_wing")
        self._beak = colors.color("beak")
        self._eye = colors.color("eye")
        self._text_color = (255, 255, 255)
        self._text_shadow = (40, 40, 60)

        self._background = self._create_background()

    @property
    def window_size(self) -> Tuple[int, int]:
        return (int(self._width * self._scale), int(self._height * self._scale))

    def _create_background(self) -> pygame.Surface:
        """Sky gradient with the ground strip."""
        surface = pygame.Surface((self._width, self._height))
        for y in range(self._height):
            t = y / self._height
            color = tuple(
                int(top * (1 - t) + bottom * t)
                for top, bottom in zip(self._sky_top, self._sky_bottom)
            )
            pygame.draw.line(surface, color, (0, y), (self._width, y))

        ground_y = self._height - self._config.playfield.ground_height
        pygame.draw.rect(
            surface, self._ground,
            (0, ground_y, self._width, self._config.playfield.ground_height)
        )
        pygame.draw.rect(surface, self._ground_shadow, (0, ground_y, self._width, 6))
        return surface

    def render(self, snapshot: RenderSnapshot) -> np.ndarray:
        """
        Render to RGB array at play-field resolution, overlay included.

        Returns:
            (height, width, 3) uint8 array.
        """
        surface = pygame.Surface((self._width, self._height))
        self._render_to_surface(surface, snapshot)
        self._draw_overlay(surface, snapshot)
        array = pygame.surfarray.array3d(surface)
        return np.transpose(array, (1, 0, 2))

    def render_to_screen(self, snapshot: RenderSnapshot) -> None:
        """Render to the pygame window, creating it on first use."""
        if self._screen is None:
            self._screen = pygame.display.set_mode(self.window_size)
            pygame.display.set_caption("Flapgate")

        field = pygame.Surface((self._width, self._height))
        self._render_to_surface(field, snapshot)
        if self._scale != 1.0:
            field = pygame.transform.smoothscale(field, self.window_size)
        self._screen.blit(field, (0, 0))
        self._draw_overlay(self._screen, snapshot)
        pygame.display.flip()

    def _render_to_surface(self, surface: pygame.Surface, snapshot: RenderSnapshot) -> None:
        surface.blit(self._background, (0, 0))
        for obstacle in snapshot.obstacles:
            self._draw_obstacle(surface, obstacle, snapshot)
        self._draw_avatar(surface, snapshot.avatar)

    def _draw_obstacle(
        self,
        surface: pygame.Surface,
        obstacle: ObstacleView,
        snapshot: RenderSnapshot
    ) -> None:
        """Draw the top and bottom segments with a shaded right edge."""
        width = snapshot.obstacle_width
        top_height = obstacle.gap_y - snapshot.gap_size / 2
        bottom_y = obstacle.gap_y + snapshot.gap_size / 2
        bottom_height = snapshot.ground_y - bottom_y

        x = int(obstacle.x)
        w = int(width)
        for y, h in ((0, top_height), (bottom_y, bottom_height)):
            if h <= 0:
                continue
            pygame.draw.rect(surface, self._pipe, (x, int(y), w, int(h)))
            pygame.draw.rect(surface, self._pipe_shadow, (x + w - 6, int(y), 6, int(h)))

    def _draw_avatar(self, surface: pygame.Surface, avatar: AvatarView) -> None:
        """Draw the bird on its own surface and tilt it with velocity."""
        r = int(avatar.radius)
        size = r * 2 + 20
        sprite = pygame.Surface((size, size), pygame.SRCALPHA)
        c = size // 2

        pygame.draw.circle(sprite, self._bird, (c, c), r)
        wing = pygame.Rect(0, 0, 12, 8)
        wing.center = (c - 4, c + 2)
        pygame.draw.ellipse(sprite, self._bird_wing, wing)
        pygame.draw.polygon(
            sprite, self._beak,
            [(c + r - 2, c - 3), (c + r + 8, c), (c + r - 2, c + 3)]
        )
        pygame.draw.circle(sprite, self._eye, (c - 4, c - 4), 2)

        tilt = max(-0.4, min(0.6, avatar.velocity / 10))
        rotated = pygame.transform.rotate(sprite, -math.degrees(tilt))
        rect = rotated.get_rect(center=(int(avatar.x), int(avatar.y)))
        surface.blit(rotated, rect)

    def _blit_text(self, screen: pygame.Surface, font, text: str, center: Tuple[int, int]) -> None:
        shadow = font.render(text, True, self._text_shadow)
        label = font.render(text, True, self._text_color)
        rect = label.get_rect(center=center)
        screen.blit(shadow, rect.move(2, 2))
        screen.blit(label, rect)

    def _draw_overlay(self, screen: pygame.Surface, snapshot: RenderSnapshot) -> None:
        """Score labels plus idle / game-over messages."""
        width, height = screen.get_size()
        self._blit_text(screen, self._font_large, str(snapshot.score), (width // 2, 40))
        self._blit_text(
            screen, self._font_small, f"Best: {snapshot.best_score}", (width // 2, 72)
        )

        if snapshot.phase == "playing":
            return

        overlay = pygame.Surface((width, height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 110))
        screen.blit(overlay, (0, 0))

        if snapshot.is_over:
            title, hint = "Game Over", "Click or press space to try again."
        else:
            title, hint = "Flapgate", "Click or press space to start."
        self._blit_text(screen, self._font_large, title, (width // 2, height // 2 - 20))
        self._blit_text(screen, self._font_small, hint, (width // 2, height // 2 + 20))

    def close(self) -> None:
        """Release the display."""
        if self._screen is not None:
            pygame.display.quit()
            self._screen = None
