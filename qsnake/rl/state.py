# qsnake/rl/state.py
from __future__ import annotations
from bisect import bisect_left
from typing import NamedTuple, Optional, Sequence, Tuple

from qsnake.core.interfaces import Direction, Position

DEFAULT_BUCKETS: Tuple[int, ...] = (2, 5, 10)


class StateKey(NamedTuple):
    direction: Direction
    food_dx: int          # -1 food to the left, 1 to the right, 0 same column
    food_dy: int          # -1 food above, 1 below, 0 same row
    distance_bucket: int
    danger_ahead: bool
    danger_right: bool
    danger_left: bool


def manhattan(a, b) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


def is_danger(snake: Sequence[Position], cell, grid_size: int) -> bool:
    """Wall or body at `cell`. The head (index 0) never counts as body."""
    x, y = cell
    if not (0 <= x < grid_size and 0 <= y < grid_size):
        return True
    return any(s[0] == x and s[1] == y for s in snake[1:])


def encode_state(
    snake: Sequence[Position],
    food: Optional[Position],
    direction: Direction,
    grid_size: int,
    buckets: Sequence[int] = DEFAULT_BUCKETS,
) -> StateKey:
    head = snake[0]
    if food is None:
        # board is full; nothing to chase
        fdx = fdy = 0
        bucket = 0
    else:
        fdx = _sign(food[0] - head[0])
        fdy = _sign(food[1] - head[1])
        bucket = bisect_left(buckets, manhattan(head, food))

    def neighbour(d: Direction):
        dx, dy = d.vector
        return (head[0] + dx, head[1] + dy)

    direction = Direction(direction)
    return StateKey(
        direction=direction,
        food_dx=fdx,
        food_dy=fdy,
        distance_bucket=bucket,
        danger_ahead=is_danger(snake, neighbour(direction), grid_size),
        danger_right=is_danger(snake, neighbour(direction.turn_right()), grid_size),
        danger_left=is_danger(snake, neighbour(direction.turn_left()), grid_size),
    )
