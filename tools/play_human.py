"""
Human Play Mode
================

Play Flapgate interactively.

Controls:
    - Space / Up / Click / Touch: Flap (also starts a run when idle or over)
    - Enter / R: Start (restart) a run
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--scale SCALE] [--fps FPS] [--debug]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from flapgate.flap_core.config_loader import load_config, GameConfig
from flapgate.flap_core.game import CoreGame, GamePhase
from flapgate.flap_core.scheduler import FrameClock
from flapgate.flap_core.state_snapshot import RenderSnapshot

logger = logging.getLogger(__name__)

FLAP_KEYS = (pygame.K_SPACE, pygame.K_UP) if PYGAME_AVAILABLE else ()
START_KEYS = (pygame.K_RETURN, pygame.K_r) if PYGAME_AVAILABLE else ()


class HumanPlayer:
    """
    Pygame front end: turns input events into flap/start intents and
    drives the frame clock once per display refresh.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        scale: Optional[float] = None,
        target_fps: Optional[int] = None
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps or config.render.fps

        pygame.init()
        self._pg_clock = pygame.time.Clock()

        # Imported late so the renderer sees an initialized pygame
        from flapgate.flap_core.render_pygame import PygameRenderer
        self._renderer = PygameRenderer(config, scale=scale)

        self._frames = FrameClock()
        self._game = CoreGame(
            config=config,
            seed=seed,
            clock=self._frames,
            render_callback=self._on_render
        )
        self._game.add_score_listener(self._on_score)
        self._game.add_phase_listener(self._on_phase)

        self._latest: Optional[RenderSnapshot] = None
        self._running = True

    def _on_render(self, snapshot: RenderSnapshot) -> None:
        self._latest = snapshot

    def _on_score(self, score: int, best: int) -> None:
        pygame.display.set_caption(f"Flapgate - Score {score} | Best {best}")

    def _on_phase(self, old: GamePhase, new: GamePhase) -> None:
        if new is GamePhase.OVER:
            print(f"GAME OVER - Score: {self._game.score} (best {self._game.best_score})")

    def run(self) -> int:
        """Run the event loop. Returns the best score of the session."""
        print("=== Flapgate ===")
        print("Space / Up / Click to flap, Enter or R to restart, ESC to quit")
        print()

        while self._running:
            self._handle_events()
            self._latest = None
            self._frames.run_frame()
            self._renderer.render_to_screen(self._latest or self._game.get_render_snapshot())
            self._pg_clock.tick(self._target_fps)

        self._game.cancel_scheduled()
        self._renderer.close()
        pygame.quit()
        return self._game.best_score

    def _handle_events(self) -> None:
        """Normalize pygame events into intents, applied immediately."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in FLAP_KEYS:
                    self._game.flap()
                elif event.key in START_KEYS:
                    self._game.start()

            elif event.type == pygame.MOUSEBUTTONDOWN:
                # Touch screens also emit synthetic mouse events
                if event.button == 1 and not getattr(event, "touch", False):
                    self._game.flap()

            elif event.type == pygame.FINGERDOWN:
                self._game.flap()


def main():
    parser = argparse.ArgumentParser(description="Play Flapgate interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--scale", type=float, default=None, help="Window scale factor")
    parser.add_argument("--fps", type=int, default=None, help="Target FPS")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    try:
        config = load_config(args.config)
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            scale=args.scale,
            target_fps=args.fps
        )
        best = player.run()
        print(f"\nBest Score: {best}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
