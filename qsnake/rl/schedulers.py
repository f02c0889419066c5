from __future__ import annotations
from typing import Protocol

class EpsilonScheduler(Protocol):
    @property
    def value(self) -> float: ...
    def step(self) -> float: ...


class GeometricEpsilon(EpsilonScheduler):
    """Multiplicative decay towards a floor, with an occasional capped kick back up.

    `step()` only ever lowers the rate; `boost()` is the single way it can rise.
    The rate always stays inside [floor, 1].
    """
    def __init__(self, start: float, floor: float, decay: float,
                 boost_by: float = 0.0, boost_cap: float = 1.0):
        if not 0.0 <= floor <= 1.0:
            raise ValueError(f"floor must be in [0, 1], got {floor}")
        self.floor = floor
        self.decay = decay
        self.boost_by = boost_by
        self.boost_cap = min(1.0, max(floor, boost_cap))
        self._value = self._clamp(start)

    def _clamp(self, v: float) -> float:
        return min(1.0, max(self.floor, v))

    @property
    def value(self) -> float:
        return self._value

    def step(self) -> float:
        self._value = max(self.floor, self._value * self.decay)
        return self._value

    def boost(self) -> float:
        if self._value < self.boost_cap:
            self._value = self._clamp(min(self.boost_cap, self._value + self.boost_by))
        return self._value
