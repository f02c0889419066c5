# qsnake/core/interfaces.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import NamedTuple, Optional, Protocol, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .grid_world import GridWorld


class Position(NamedTuple):
    x: int
    y: int


class Direction(IntEnum):
    # order is the Q-vector order
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    @property
    def vector(self) -> Tuple[int, int]:
        return _VECTORS[self]

    @property
    def opposite(self) -> "Direction":
        return Direction((self + 2) % 4)

    def turn_right(self) -> "Direction":
        return Direction((self + 1) % 4)

    def turn_left(self) -> "Direction":
        return Direction((self + 3) % 4)


# screen coordinates: y grows downwards
_VECTORS = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}


class EpisodeStatus(str, Enum):
    RUNNING = "running"
    GAME_OVER = "game_over"
    WON = "won"          # board full, no cell left for food


@dataclass(frozen=True)
class Snapshot:
    snake: Tuple[Position, ...]   # head first
    food: Optional[Position]
    direction: Direction
    score: int
    steps: int
    status: EpisodeStatus
    reason: str | None
    grid_size: int

    @property
    def head(self) -> Position:
        return self.snake[0]

    @property
    def alive(self) -> bool:
        return self.status is EpisodeStatus.RUNNING

    @property
    def terminated(self) -> bool:
        return not self.alive


@dataclass(frozen=True)
class StepOutcome:
    alive: bool
    ate_food: bool
    snake: Tuple[Position, ...]
    food: Optional[Position]
    score: int
    status: EpisodeStatus
    reason: str | None
    direction: Direction


@dataclass(frozen=True)
class StatsRecord:
    score: int
    high_score: int
    games_played: int
    average_score: float


class Controller(Protocol):
    """Anything that can pick the next heading for the world (None = keep going)."""
    def next_direction(self, world: "GridWorld") -> Optional[Direction]: ...
