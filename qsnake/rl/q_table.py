from __future__ import annotations
from typing import Dict, Iterator
import numpy as np

from qsnake.core.interfaces import Direction
from .state import StateKey

N_ACTIONS = len(Direction)


class QTable:
    """Lazy StateKey -> action-value table (UP, RIGHT, DOWN, LEFT).

    Rows are created on first visit with small noise from the owning agent's RNG,
    nudged up for the moves that point at the food when `food_bias` > 0.
    """

    def __init__(self, rng: np.random.Generator, noise: float = 0.1, food_bias: float = 0.0):
        self._rows: Dict[StateKey, np.ndarray] = {}
        self._rng = rng
        self.noise = noise
        self.food_bias = food_bias

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: StateKey) -> bool:
        return key in self._rows

    def __iter__(self) -> Iterator[StateKey]:
        return iter(self._rows)

    def values(self, key: StateKey) -> np.ndarray:
        row = self._rows.get(key)
        if row is None:
            row = self._init_row(key)
            self._rows[key] = row
        return row

    def _init_row(self, key: StateKey) -> np.ndarray:
        row = self._rng.random(N_ACTIONS) * self.noise
        if self.food_bias:
            if key.food_dx > 0: row[Direction.RIGHT] += self.food_bias
            elif key.food_dx < 0: row[Direction.LEFT] += self.food_bias
            if key.food_dy > 0: row[Direction.DOWN] += self.food_bias
            elif key.food_dy < 0: row[Direction.UP] += self.food_bias
        return row

    def snapshot(self) -> Dict[StateKey, np.ndarray]:
        return {k: v.copy() for k, v in self._rows.items()}
