from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional

from qsnake.core.interfaces import StatsRecord

class EMA:
    """Exponential moving average."""
    def __init__(self, alpha: float):
        self.alpha = alpha
        self.value: Optional[float] = None
    def update(self, x: float) -> float:
        self.value = x if self.value is None else (self.alpha * x + (1 - self.alpha) * self.value)
        return self.value

class WindowedStat:
    """Fixed-window mean/min/max."""
    def __init__(self, window: int):
        self.window = window
        self.buf: Deque[float] = deque(maxlen=window)
    def add(self, x: float) -> None:
        self.buf.append(float(x))
    def summary(self) -> Dict[str, float]:
        if not self.buf:
            return {"mean": 0.0, "min": 0.0, "max": 0.0}
        b = list(self.buf)
        return {"mean": sum(b) / len(b), "min": min(b), "max": max(b)}


@dataclass
class SessionStats:
    """Running totals across episodes of one session."""
    score: int = 0
    high_score: int = 0
    games_played: int = 0
    total_score: int = 0

    @property
    def average_score(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.total_score / self.games_played

    def record_food(self, score: int) -> None:
        self.score = score
        self.high_score = max(self.high_score, score)

    def end_episode(self, score: int) -> None:
        self.score = score
        self.high_score = max(self.high_score, score)
        self.games_played += 1
        self.total_score += score

    def start_episode(self) -> None:
        self.score = 0

    def record(self) -> StatsRecord:
        return StatsRecord(
            score=self.score,
            high_score=self.high_score,
            games_played=self.games_played,
            average_score=round(self.average_score, 2),
        )
