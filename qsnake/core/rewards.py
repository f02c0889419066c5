from __future__ import annotations
from typing import Protocol
from .interfaces import EpisodeStatus, Snapshot


class RewardAdapter(Protocol):
    """Maps (prev, cur) snapshots to a scalar reward."""
    def compute(self, prev: Snapshot, cur: Snapshot) -> float: ...


class ClassicRewards(RewardAdapter):
    """Big carrot for food, big stick for dying, a small cost for every other move."""
    def __init__(self, food: float = 10.0, step: float = -0.1, death: float = -15.0):
        self.food = food
        self.step = step
        self.death = death

    def compute(self, prev: Snapshot, cur: Snapshot) -> float:
        if cur.status is EpisodeStatus.GAME_OVER:
            return self.death
        if cur.score > prev.score:
            return self.food
        return self.step
