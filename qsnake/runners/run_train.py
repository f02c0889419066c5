from __future__ import annotations
import os
from typing import Optional, Tuple

import numpy as np

from qsnake.config import AppConfig
from qsnake.core.grid_world import GridWorld
from qsnake.core.rewards import ClassicRewards
from qsnake.policy.policy import ManualPolicy
from qsnake.rl.agent_config import QAgentConfig
from qsnake.rl.logging import ALL_KEYS, CSVLogger, Logger, make_episode_logger
from qsnake.rl.metrics import EMA, SessionStats, WindowedStat
from qsnake.rl.q_agent import QAgent
from qsnake.runners.episode_loop import EpisodeLoop, LoopHooks, Mode
from qsnake.runners.scheduler import SimulatedClock, TickScheduler


def make_rngs(seed: Optional[int]) -> Tuple[np.random.Generator, np.random.Generator]:
    """Independent, reproducible streams for the world and the agent."""
    world_ss, agent_ss = np.random.SeedSequence(seed).spawn(2)
    return np.random.default_rng(world_ss), np.random.default_rng(agent_ss)


def build_loop(cfg: AppConfig, hooks: Optional[LoopHooks] = None,
               agent_cfg: Optional[QAgentConfig] = None) -> EpisodeLoop:
    world_rng, agent_rng = make_rngs(cfg.seed)
    world = GridWorld(cfg.grid_size, rng=world_rng)
    # food must count as a large reward or eating never clears the stall counter
    agent_cfg = agent_cfg or QAgentConfig(seed=cfg.seed, large_reward=cfg.food_reward)
    agent = QAgent(cfg.grid_size, cfg.learning_rate, agent_cfg, rng=agent_rng)
    return EpisodeLoop(
        world,
        agent,
        ManualPolicy(),
        game_speed=cfg.game_speed,
        mode=Mode(cfg.mode),
        training=cfg.training,
        restart_delay=cfg.restart_delay,
        rewards=ClassicRewards(cfg.food_reward, cfg.step_reward, cfg.death_reward),
        session=SessionStats(),
        hooks=hooks,
    )


def main(cfg: Optional[AppConfig] = None, logger: Optional[Logger] = None) -> EpisodeLoop:
    """Headless AI training on simulated time; returns the trained loop."""
    cfg = cfg or AppConfig()
    cfg = cfg.with_(mode="ai", training=True, game_speed=cfg.train_speed, restart_delay=0.0)

    own_logger = logger is None and cfg.log_dir is not None
    if own_logger:
        logger = CSVLogger(os.path.join(cfg.log_dir, "logs.csv"), fieldnames=ALL_KEYS)

    loop = build_loop(cfg)
    if logger is not None:
        log_episode = make_episode_logger(
            logger=logger,
            step_getter=lambda: loop.agent.state.decisions,
            ema_score=EMA(0.05),
            win_score=WindowedStat(100),
        )
    else:
        log_episode = None

    def on_episode_end(ep, s):
        if log_episode is not None:
            log_episode(ep, s)
        if cfg.print_every and (ep + 1) % cfg.print_every == 0:
            print(f"[ep {ep}] score={s['final_score']} reason={s['death_reason']} "
                  f"avg={s['average_score']:.2f} best={s['high_score']} "
                  f"eps={s['epsilon']:.3f} states={s['q_states']}")

    loop.hooks.on_episode_end = on_episode_end

    print("=== qsnake Q-learning ===")
    print(f"grid: {cfg.grid_size}x{cfg.grid_size}  lr: {cfg.learning_rate}  gamma: {loop.agent.gamma}")
    print(f"episodes: {cfg.episodes}  seed: {cfg.seed}")
    if own_logger:
        print(f"logs: {logger.path}")

    def tick(now: float) -> None:
        loop.tick(now)
        if loop.session.games_played >= cfg.episodes:
            sched.stop()

    clock = SimulatedClock()
    sched = TickScheduler(tick, frame_interval=1.0 / cfg.game_speed,
                          clock=clock.now, sleep=clock.sleep)
    try:
        sched.run()
    finally:
        if own_logger:
            logger.close()

    st = loop.session.record()
    print(f"done: games={st.games_played} avg={st.average_score:.2f} best={st.high_score} "
          f"states={len(loop.agent.q)} eps={loop.agent.epsilon:.3f}")
    return loop
