# qsnake/core/grid_world.py  (pure rules, no pygame)
from __future__ import annotations
from typing import List, Optional
import numpy as np
from .interfaces import Direction, EpisodeStatus, Position, Snapshot, StepOutcome


class GridWorld:
    """Square snake board: owns the body, the food and the scoring rules of one episode."""

    def __init__(
        self,
        grid_size: int,
        rng: Optional[np.random.Generator] = None,
        max_food_draws: Optional[int] = None,
    ):
        self.grid_size = _check_grid_size(grid_size)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_food_draws = max_food_draws
        self.high_score = 0
        self._reset_state()

    def _reset_state(self) -> None:
        c = self.grid_size // 2
        self.snake: List[Position] = [Position(c, c)]
        self.direction = Direction.RIGHT
        self.score = 0
        self.steps = 0
        self.status = EpisodeStatus.RUNNING
        self.reason: str | None = None
        self.food = self.place_food()

    def reset(self, grid_size: Optional[int] = None) -> Snapshot:
        if grid_size is not None:
            self.grid_size = _check_grid_size(grid_size)
        self._reset_state()
        return self.snapshot()

    @property
    def alive(self) -> bool:
        return self.status is EpisodeStatus.RUNNING

    def place_food(self) -> Optional[Position]:
        """Pick a random free cell for the food, or None when the snake fills the board.

        Rejection sampling is bounded; once the bound is hit the free cells are
        enumerated so a crowded board still resolves in one more draw.
        """
        n = self.grid_size
        occ = set(self.snake)
        if len(occ) >= n * n:
            self.food = None
            return None

        draws = self.max_food_draws if self.max_food_draws is not None else 4 * n * n
        for _ in range(draws):
            x, y = self.rng.integers(0, n, size=2)
            cand = Position(int(x), int(y))
            if cand not in occ:
                self.food = cand
                return cand

        free = [Position(x, y) for x in range(n) for y in range(n) if (x, y) not in occ]
        self.food = free[int(self.rng.integers(len(free)))]
        return self.food

    def turn(self, direction: Optional[Direction]) -> Direction:
        # reversing onto the neck is never allowed; keep the current heading instead
        if direction is not None and direction != self.direction.opposite:
            self.direction = Direction(direction)
        return self.direction

    def in_bounds(self, pos) -> bool:
        return 0 <= pos[0] < self.grid_size and 0 <= pos[1] < self.grid_size

    def step(self, direction: Optional[Direction] = None) -> StepOutcome:
        if not self.alive:
            return self._outcome(ate_food=False)
        self.turn(direction)

        hx, hy = self.snake[0]
        dx, dy = self.direction.vector
        new_head = Position(hx + dx, hy + dy)
        self.steps += 1

        # collisions
        if not self.in_bounds(new_head):
            self.status, self.reason = EpisodeStatus.GAME_OVER, "wall"
            return self._outcome(ate_food=False)
        if new_head in self.snake:
            self.status, self.reason = EpisodeStatus.GAME_OVER, "self"
            return self._outcome(ate_food=False)

        self.snake.insert(0, new_head)
        ate = new_head == self.food
        if ate:
            self.score += 1
            self.high_score = max(self.high_score, self.score)
            if self.place_food() is None:
                self.status, self.reason = EpisodeStatus.WON, "board_full"
        else:
            self.snake.pop()
        return self._outcome(ate_food=ate)

    def _outcome(self, ate_food: bool) -> StepOutcome:
        return StepOutcome(
            alive=self.alive,
            ate_food=ate_food,
            snake=tuple(self.snake),
            food=self.food,
            score=self.score,
            status=self.status,
            reason=self.reason,
            direction=self.direction,
        )

    def snapshot(self) -> Snapshot:
        return Snapshot(
            snake=tuple(self.snake),
            food=self.food,
            direction=self.direction,
            score=self.score,
            steps=self.steps,
            status=self.status,
            reason=self.reason,
            grid_size=self.grid_size,
        )


def _check_grid_size(grid_size: int) -> int:
    if int(grid_size) != grid_size or grid_size <= 0:
        raise ValueError(f"grid_size must be a positive integer, got {grid_size!r}")
    return int(grid_size)
