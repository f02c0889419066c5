from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING
import numpy as np

from qsnake.core.interfaces import Controller, Direction, Snapshot
from .agent_config import QAgentConfig
from .q_table import QTable
from .schedulers import GeometricEpsilon
from .state import StateKey, encode_state, manhattan

if TYPE_CHECKING:
    from qsnake.core.grid_world import GridWorld


@dataclass
class QAgentState:
    decisions: int = 0
    updates: int = 0
    stall: int = 0          # decisions since the last large reward
    boosts: int = 0


class QAgent(Controller):
    """Tabular Q-learning snake controller.

    One instance lives for the whole session; its table and exploration rate
    carry over from episode to episode.
    """
    def __init__(
        self,
        grid_size: int,
        learning_rate: float = 0.1,
        cfg: QAgentConfig = QAgentConfig(),
        rng: Optional[np.random.Generator] = None,
    ):
        if not 0.0 < learning_rate <= 1.0:
            raise ValueError(f"learning_rate must be in (0, 1], got {learning_rate}")
        self.grid_size = grid_size
        self.lr = learning_rate
        self.cfg = cfg
        self.gamma = cfg.gamma
        self.rng = rng if rng is not None else np.random.default_rng(cfg.seed)
        self.q = QTable(self.rng, noise=cfg.init_noise, food_bias=cfg.init_food_bias)
        self.eps = GeometricEpsilon(
            cfg.epsilon_start, cfg.epsilon_min, cfg.epsilon_decay,
            boost_by=cfg.epsilon_boost, boost_cap=cfg.epsilon_boost_cap,
        )
        self.state = QAgentState()
        self.last_state: Optional[StateKey] = None
        self.last_action: Optional[Direction] = None
        self._pending_reward = 0.0

    @property
    def epsilon(self) -> float:
        return self.eps.value

    # ------------- State encoding -------------
    def get_state(self, snake, food, direction: Direction) -> StateKey:
        return encode_state(snake, food, direction, self.grid_size, self.cfg.distance_buckets)

    # ------------- Controller protocol -------------
    def next_direction(self, world: "GridWorld") -> Direction:
        return self.get_action(world.snapshot())

    def get_action(self, snap: Snapshot) -> Direction:
        cur = snap.direction
        key = self.get_state(snap.snake, snap.food, cur)
        self.last_state = key

        if self.rng.random() < self.eps.value:
            choices = [d for d in Direction if d != cur.opposite]
            action = choices[int(self.rng.integers(len(choices)))]
        else:
            q = self.q.values(key).copy()
            q[cur.opposite] = -np.inf
            best = np.flatnonzero(q == q.max())
            action = Direction(int(best[int(self.rng.integers(len(best)))]))
        self.last_action = action

        self.eps.step()
        self.state.decisions += 1
        self.state.stall += 1
        if self.state.stall > self.cfg.stall_threshold:
            self.eps.boost()
            self.state.boosts += 1
            self.state.stall = 0
        return action

    # ------------- Experience & learning -------------
    def receive_reward(self, reward: float) -> None:
        self._pending_reward += float(reward)
        if reward >= self.cfg.large_reward:
            self.state.stall = 0

    def _shaping(self, prev: Snapshot, cur: Snapshot) -> float:
        if prev.food is None or cur.food is None:
            return 0.0
        before = manhattan(prev.head, prev.food)
        after = manhattan(cur.head, cur.food)
        if after < before:
            return self.cfg.closer_bonus
        if after > before:
            return self.cfg.farther_penalty
        return 0.0

    def learn(self, prev: Snapshot, cur: Snapshot, ate_food: bool) -> Dict[str, Any] | None:
        if self.last_state is None or self.last_action is None:
            return None

        reward = self._pending_reward
        self._pending_reward = 0.0
        if not ate_food:
            reward += self._shaping(prev, cur)

        row = self.q.values(self.last_state)
        a = self.last_action
        if cur.terminated:
            # no successor value after a terminal step
            target = reward
        else:
            next_key = self.get_state(cur.snake, cur.food, cur.direction)
            target = reward + self.gamma * float(np.max(self.q.values(next_key)))
        td_error = target - row[a]
        row[a] += self.lr * td_error
        self.state.updates += 1

        return {
            "step": self.state.decisions,
            "updates": self.state.updates,
            "reward": reward,
            "td_error": float(td_error),
            "q_value": float(row[a]),
            "epsilon": self.eps.value,
            "q_states": len(self.q),
        }

    def discard_reward(self) -> None:
        self._pending_reward = 0.0

    def end_episode(self) -> None:
        self.last_state = None
        self.last_action = None
        self._pending_reward = 0.0

    # ------------- Inspection -------------
    def q_table_snapshot(self) -> Dict[StateKey, np.ndarray]:
        return self.q.snapshot()

    def stats(self) -> Dict[str, Any]:
        return {
            "decisions": self.state.decisions,
            "updates": self.state.updates,
            "boosts": self.state.boosts,
            "epsilon": self.eps.value,
            "q_states": len(self.q),
        }
