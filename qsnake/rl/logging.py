from __future__ import annotations
import csv, os
from typing import Dict, Any, Protocol, Optional, Callable

from .metrics import EMA, WindowedStat

ALL_KEYS = [
    "step", "episode",
    # episode
    "epis/final_score", "epis/score_ema", "epis/score_mean100",
    "epis/len", "epis/reward",
    "epis/death_wall", "epis/death_self", "epis/board_full",
    # agent
    "agent/epsilon", "agent/q_states",
    # session
    "session/average_score", "session/high_score",
]

class Logger(Protocol):
    def log(self, step: int, scalars: Dict[str, Any]) -> None: ...
    def flush(self) -> None: ...
    def close(self) -> None: ...


class CSVLogger:
    """Append-only CSV logger with header auto-discovery or predefined schema."""
    def __init__(self, path: str, fieldnames: list[str] | None = None):
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self.path = path
        self._fieldnames = fieldnames
        self._file = open(path, "a", newline="")
        self._writer = None

    def log(self, step: int, scalars: Dict[str, Any]) -> None:
        scalars = {"step": step, **scalars}
        if self._writer is None:
            if self._fieldnames is None:
                self._fieldnames = list(scalars.keys())
            self._writer = csv.DictWriter(
                self._file,
                fieldnames=self._fieldnames,
                extrasaction="ignore",   # unknown keys are dropped, not fatal
            )
            if self._file.tell() == 0:
                self._writer.writeheader()
        self._writer.writerow(scalars)

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


class MemoryLogger:
    """Keeps rows in a list; handy for tests and for runners without an output dir."""
    def __init__(self):
        self.rows: list[Dict[str, Any]] = []
    def log(self, step: int, scalars: Dict[str, Any]) -> None:
        self.rows.append({"step": step, **scalars})
    def flush(self) -> None:
        pass
    def close(self) -> None:
        pass


def make_episode_logger(
    *,
    logger: Logger,
    step_getter: Callable[[], int],
    ema_score: Optional[EMA] = None,
    win_score: Optional[WindowedStat] = None,
) -> Callable[[int, Dict[str, Any]], None]:
    """
    Returns a function(ep: int, s: Dict[str, Any]) -> None that:
      - updates EMA/window stats of the final score
      - logs all episode metrics

    'step_getter' should return the agent's decision count for the CSV 'step' column.
    """
    ema_score = ema_score or EMA(0.05)
    win_score = win_score or WindowedStat(100)

    def _on_episode_end(ep: int, s: Dict[str, Any]) -> None:
        score = int(s.get("final_score", 0))
        s_ema = ema_score.update(score)
        win_score.add(score)
        reason = s.get("death_reason")

        scalars = {
            "episode": ep,
            "epis/final_score": score,
            "epis/score_ema": s_ema,
            "epis/score_mean100": win_score.summary()["mean"],
            "epis/len": int(s.get("steps", 0)),
            "epis/reward": float(s.get("reward", 0.0)),
            "epis/death_wall": 1.0 if reason == "wall" else 0.0,
            "epis/death_self": 1.0 if reason == "self" else 0.0,
            "epis/board_full": 1.0 if reason == "board_full" else 0.0,
            "agent/epsilon": s.get("epsilon"),
            "agent/q_states": s.get("q_states"),
            "session/average_score": s.get("average_score"),
            "session/high_score": s.get("high_score"),
        }
        logger.log(int(step_getter()), scalars)
        logger.flush()

    return _on_episode_end
