# qsnake/runners/run_play.py
from __future__ import annotations
import time
from typing import Optional

import pygame as pg

from qsnake.config import AppConfig
from qsnake.core.interfaces import StatsRecord
from qsnake.runners.episode_loop import EpisodeLoop, GameOverEvent, LoopHooks
from qsnake.runners.run_train import build_loop
from qsnake.runners.scheduler import TickScheduler
from qsnake.viz.keyboard import Keyboard


def caption(loop: EpisodeLoop, st: StatsRecord) -> str:
    mode = loop.mode.value.upper() + (" +train" if loop.training else "")
    return (f"{mode} | speed {loop.game_speed:g} | score {st.score}  best {st.high_score}"
            f"  games {st.games_played}  avg {st.average_score:.2f}")


def main(cfg: Optional[AppConfig] = None) -> None:
    """Real-time session. The window only captures keys; its title carries the stats."""
    cfg = cfg or AppConfig()
    hooks = LoopHooks()
    loop = build_loop(cfg, hooks)

    def on_stats(st: StatsRecord) -> None:
        pg.display.set_caption(caption(loop, st))

    def on_game_over(ev: GameOverEvent) -> None:
        if ev.auto_restart:
            return
        print(f"Game over! score={ev.score} ({ev.reason}). Press any key to restart.")
        pg.display.set_caption(f"Game over! score {ev.score} - press any key")

    hooks.on_stats = on_stats
    hooks.on_game_over = on_game_over

    pg.init()
    pg.display.set_mode((cfg.window_px, cfg.window_px))
    pg.display.set_caption(cfg.window_title)
    kbd = Keyboard(loop)

    print("=== qsnake ===")
    print("arrows/WASD steer (manual)  M mode  T training  +/- speed  Esc quit")

    def frame(now: float) -> None:
        if kbd.poll() == "quit":
            sched.stop()
            return
        if loop.tick(now) and loop.world.alive:
            on_stats(loop.session.record())

    sched = TickScheduler(frame, frame_interval=1.0 / cfg.frame_rate,
                          clock=time.perf_counter, sleep=time.sleep)
    try:
        sched.run()
    finally:
        pg.quit()
