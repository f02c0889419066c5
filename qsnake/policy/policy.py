# policy.py
from __future__ import annotations
from collections import deque
from typing import Deque, Optional, TYPE_CHECKING
import threading

from qsnake.core.interfaces import Controller, Direction

if TYPE_CHECKING:
    from qsnake.core.grid_world import GridWorld


class ManualPolicy(Controller):
    """FIFO of human direction intents.

    `push` may be called from an input thread; `next_direction` runs on the
    tick thread. A lock guards the deque so both sides see whole operations.
    """
    def __init__(self, max_pending: int = 3):
        self.max_pending = max_pending
        self._q: Deque[Direction] = deque()
        self._lock = threading.Lock()

    def push(self, direction: Direction, current: Direction) -> bool:
        """Queue `direction` unless it reverses the latest queued (or current) heading.

        A full queue rejects the new intent; queued ones are never displaced.
        """
        direction = Direction(direction)
        with self._lock:
            if len(self._q) >= self.max_pending:
                return False
            ref = self._q[-1] if self._q else Direction(current)
            if direction == ref.opposite or direction == ref:
                return False
            self._q.append(direction)
            return True

    def next_direction(self, world: "GridWorld") -> Optional[Direction]:
        with self._lock:
            return self._q.popleft() if self._q else None

    def clear(self) -> None:
        with self._lock:
            self._q.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._q)
