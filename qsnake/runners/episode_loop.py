from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from qsnake.core.grid_world import GridWorld
from qsnake.core.interfaces import Direction, StatsRecord
from qsnake.core.rewards import ClassicRewards, RewardAdapter
from qsnake.policy.policy import ManualPolicy
from qsnake.rl.metrics import SessionStats
from qsnake.rl.q_agent import QAgent


# float clocks drift; a tick this close to the deadline still counts
_TIME_EPS = 1e-9


class Mode(str, Enum):
    AI = "ai"
    MANUAL = "manual"


class LoopState(str, Enum):
    RUNNING = "running"
    GAME_OVER = "game_over"              # auto restart scheduled
    AWAITING_RESTART = "awaiting_restart"  # manual play, waiting for a key


@dataclass(frozen=True)
class GameOverEvent:
    episode: int
    score: int
    reason: str | None
    steps: int
    auto_restart: bool   # False -> tell the player and wait for a restart intent


@dataclass
class LoopHooks:
    on_stats: Optional[Callable[[StatsRecord], None]] = None
    on_game_over: Optional[Callable[[GameOverEvent], None]] = None
    on_episode_end: Optional[Callable[[int, Dict[str, Any]], None]] = None
    on_learn: Optional[Callable[[Dict[str, Any]], None]] = None


class EpisodeLoop:
    """
    Frame-gated coordinator between input, the world and the agent.

    `tick(now)` is meant to be called far more often than the game speed; calls
    that arrive before 1/game_speed seconds have passed since the last accepted
    tick change nothing. Mode, speed and training flags are plain fields read at
    the start of each tick.
    """
    def __init__(
        self,
        world: GridWorld,
        agent: QAgent,
        manual: Optional[ManualPolicy] = None,
        *,
        game_speed: float = 5.0,
        mode: Mode = Mode.AI,
        training: bool = False,
        restart_delay: float = 0.5,
        rewards: Optional[RewardAdapter] = None,
        session: Optional[SessionStats] = None,
        hooks: Optional[LoopHooks] = None,
    ):
        self.world = world
        self.agent = agent
        self.manual = manual or ManualPolicy()
        self.game_speed = _check_speed(game_speed)
        self.mode = Mode(mode)
        self.training = bool(training)
        self.restart_delay = restart_delay
        self.rewards = rewards or ClassicRewards()
        self.session = session or SessionStats()
        self.hooks = hooks or LoopHooks()

        self.episode = 0
        self._last_tick: Optional[float] = None
        self._restart_at: Optional[float] = None
        self._awaiting_restart = False
        self._restart_requested = False
        self._ep_reward = 0.0

    # ------------- Intents (any thread) -------------
    def push_intent(self, direction: Direction) -> bool:
        if self.mode is not Mode.MANUAL:
            return False
        return self.manual.push(direction, self.world.direction)

    def request_restart(self) -> None:
        self._restart_requested = True

    def set_mode(self, mode: Mode) -> None:
        self.mode = Mode(mode)

    def toggle_mode(self) -> Mode:
        self.mode = Mode.MANUAL if self.mode is Mode.AI else Mode.AI
        return self.mode

    def set_training(self, training: bool) -> None:
        self.training = bool(training)

    def set_game_speed(self, speed: float) -> None:
        self.game_speed = _check_speed(speed)

    # ------------- State -------------
    @property
    def state(self) -> LoopState:
        if self.world.alive:
            return LoopState.RUNNING
        if self._awaiting_restart:
            return LoopState.AWAITING_RESTART
        return LoopState.GAME_OVER

    @property
    def auto_restart(self) -> bool:
        return self.mode is Mode.AI or self.training

    # ------------- Tick -------------
    def tick(self, now: float) -> bool:
        """Advance at most one game step. Returns True when the world stepped."""
        self._resolve_restart(now)

        if self._last_tick is not None and (now - self._last_tick) + _TIME_EPS < 1.0 / self.game_speed:
            return False
        self._last_tick = now

        if not self.world.alive:
            return False

        if self.mode is Mode.AI:
            direction = self.agent.next_direction(self.world)
        else:
            direction = self.manual.next_direction(self.world)

        prev = self.world.snapshot()
        outcome = self.world.step(direction)
        cur = self.world.snapshot()

        if self.mode is Mode.AI:
            r = self.rewards.compute(prev, cur)
            self._ep_reward += r
            self.agent.receive_reward(r)
            if self.training:
                stats = self.agent.learn(prev, cur, outcome.ate_food)
                if stats and self.hooks.on_learn:
                    self.hooks.on_learn(stats)
            else:
                self.agent.discard_reward()

        if outcome.ate_food:
            self.session.record_food(outcome.score)
            self._emit_stats()

        if not outcome.alive:
            self._game_over(now)
        return True

    def reset(self) -> None:
        self.world.reset()
        self.manual.clear()
        self.agent.end_episode()
        self.session.start_episode()
        self._ep_reward = 0.0
        self._restart_at = None
        self._awaiting_restart = False
        self._restart_requested = False
        self.episode += 1
        self._emit_stats()

    # ------------- Helpers -------------
    def _resolve_restart(self, now: float) -> None:
        if self.world.alive:
            self._restart_requested = False
            return
        if self._awaiting_restart and (self._restart_requested or self.auto_restart):
            self.reset()
        elif self._restart_at is not None and now >= self._restart_at:
            self.reset()

    def _game_over(self, now: float) -> None:
        snap = self.world.snapshot()
        self.session.end_episode(snap.score)
        self.agent.end_episode()

        auto = self.auto_restart
        if auto:
            self._restart_at = now + self.restart_delay
        else:
            self._awaiting_restart = True
            self._restart_requested = False

        if self.hooks.on_game_over:
            self.hooks.on_game_over(GameOverEvent(
                episode=self.episode, score=snap.score, reason=snap.reason,
                steps=snap.steps, auto_restart=auto,
            ))
        if self.hooks.on_episode_end:
            self.hooks.on_episode_end(self.episode, {
                "steps": snap.steps,
                "reward": self._ep_reward,
                "final_score": snap.score,
                "death_reason": snap.reason,
                "epsilon": self.agent.epsilon,
                "q_states": len(self.agent.q),
                "average_score": self.session.average_score,
                "high_score": self.session.high_score,
            })

    def _emit_stats(self) -> None:
        if self.hooks.on_stats:
            self.hooks.on_stats(self.session.record())


def _check_speed(speed: float) -> float:
    if speed <= 0:
        raise ValueError(f"game_speed must be positive, got {speed}")
    return float(speed)
