from __future__ import annotations

import argparse
import logging
from typing import Callable, Dict, Optional

import pygame

from block_drop_rl.game import BlockDropGame, GameConfig
from .renderer import Renderer


logger = logging.getLogger(__name__)

GRAVITY_EVENT = pygame.USEREVENT + 1


class PygameTimer:
    """Gravity timer backed by ``pygame.time.set_timer`` events.

    The main loop passes every event to ``handle``; gravity events invoke the
    callback registered by the game clock.
    """

    def __init__(self, event_type: int = GRAVITY_EVENT) -> None:
        self.event_type = event_type
        self._callback: Optional[Callable[[], None]] = None

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        pygame.time.set_timer(self.event_type, interval_ms)

    def cancel(self) -> None:
        pygame.time.set_timer(self.event_type, 0)
        self._callback = None

    def handle(self, event: pygame.event.Event) -> bool:
        if event.type != self.event_type:
            return False
        # Events queued before a cancel arrive with no callback and are dropped
        if self._callback is not None:
            self._callback()
        return True


def key_bindings(game: BlockDropGame) -> Dict[int, Callable[[], object]]:
    return {
        pygame.K_LEFT: game.move_left,
        pygame.K_RIGHT: game.move_right,
        pygame.K_DOWN: game.soft_drop,
        pygame.K_UP: game.rotate,
        pygame.K_z: game.rotate,
        pygame.K_x: game.rotate,
        pygame.K_SPACE: game.hard_drop,
        pygame.K_c: game.hold,
        pygame.K_p: game.toggle_pause,
        pygame.K_r: game.reset,
        pygame.K_RETURN: game.start,
    }


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Block Drop with the keyboard")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=28)
    p.add_argument("--fps", type=int, default=60)
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def run(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    pygame.init()
    try:
        clock = pygame.time.Clock()
        timer = PygameTimer()
        game = BlockDropGame(GameConfig(random_seed=args.seed), timer=timer)
        renderer = Renderer(cell_size=args.cell_size)
        bindings = key_bindings(game)

        screen = pygame.display.set_mode(renderer.window_size(game.grid.height, game.grid.width))
        pygame.display.set_caption("Block Drop - Human Play")

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif timer.handle(event):
                    continue
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        command = bindings.get(event.key)
                        if command is not None:
                            command()

            renderer.draw(screen, game.snapshot())
            clock.tick(args.fps)

        logger.info("session ended: score=%d lines=%d level=%d", game.score, game.lines, game.level)
        print(f"Final score: {game.score} (lines {game.lines}, level {game.level})")
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    run()
