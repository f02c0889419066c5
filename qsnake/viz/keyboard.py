# qsnake/viz/keyboard.py
from __future__ import annotations
from typing import Optional
import pygame as pg

from qsnake.core.interfaces import Direction
from qsnake.runners.episode_loop import EpisodeLoop, LoopState

KEY_DIRECTIONS = {
    pg.K_UP: Direction.UP, pg.K_w: Direction.UP,
    pg.K_RIGHT: Direction.RIGHT, pg.K_d: Direction.RIGHT,
    pg.K_DOWN: Direction.DOWN, pg.K_s: Direction.DOWN,
    pg.K_LEFT: Direction.LEFT, pg.K_a: Direction.LEFT,
}

SPEED_STEP = 1.0
MIN_SPEED, MAX_SPEED = 1.0, 60.0


class Keyboard:
    """Turns pygame events into loop intents. Never touches the world directly."""
    def __init__(self, loop: EpisodeLoop):
        self.loop = loop

    def poll(self) -> Optional[str]:
        for e in pg.event.get():
            if self.handle(e) == "quit":
                return "quit"
        return None

    def handle(self, e) -> Optional[str]:
        if e.type == pg.QUIT:
            return "quit"
        if e.type != pg.KEYDOWN:
            return None
        if e.key == pg.K_ESCAPE:
            return "quit"

        loop = self.loop
        if loop.state is LoopState.AWAITING_RESTART:
            # any key restarts a finished manual game
            loop.request_restart()
            return "restart"
        if e.key == pg.K_m:
            return f"mode:{loop.toggle_mode().value}"
        if e.key == pg.K_t:
            loop.set_training(not loop.training)
            return f"training:{loop.training}"
        if e.key in (pg.K_PLUS, pg.K_EQUALS, pg.K_KP_PLUS):
            loop.set_game_speed(min(MAX_SPEED, loop.game_speed + SPEED_STEP))
            return "speed"
        if e.key in (pg.K_MINUS, pg.K_KP_MINUS):
            loop.set_game_speed(max(MIN_SPEED, loop.game_speed - SPEED_STEP))
            return "speed"
        d = KEY_DIRECTIONS.get(e.key)
        if d is not None and loop.push_intent(d):
            return d.name
        return None
