from __future__ import annotations
from typing import Any, Callable, Optional
import threading, time


class SimulatedClock:
    """Virtual time: `sleep` just moves `now` forward. Lets training run flat out."""
    def __init__(self, start: float = 0.0):
        self.t = float(start)

    def now(self) -> float:
        return self.t

    def sleep(self, dt: float) -> None:
        if dt > 0:
            self.t += dt


class TickScheduler:
    """Calls `tick_fn(now)` once per frame until stopped.

    Either drive it on the calling thread with `run()` or on a background thread
    with `start()`; in both cases exactly one thread invokes `tick_fn`, so ticks
    never overlap. Once `stop()` has joined the thread no further tick fires;
    if the join times out `running` stays True until the last tick returns.
    """
    def __init__(
        self,
        tick_fn: Callable[[float], Any],
        frame_interval: float = 1.0 / 60.0,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._tick_fn = tick_fn
        self._frame_dt = max(0.0, float(frame_interval))
        self._clock = clock
        self._sleep = sleep
        self._stop = threading.Event()
        self._t: Optional[threading.Thread] = None
        self.frames = 0

    @property
    def running(self) -> bool:
        return self._t is not None and self._t.is_alive()

    def run(self, max_frames: Optional[int] = None) -> int:
        """Blocking loop on the current thread. Returns the number of frames run."""
        self._stop.clear()
        return self._loop(max_frames)

    def _loop(self, max_frames: Optional[int]) -> int:
        n = 0
        while not self._stop.is_set():
            if max_frames is not None and n >= max_frames:
                break
            t0 = self._clock()
            self._tick_fn(t0)
            n += 1
            self.frames += 1
            if self._stop.is_set():
                break
            dt = self._clock() - t0
            if self._frame_dt > dt:
                self._sleep(self._frame_dt - dt)
        return n

    def start(self, max_frames: Optional[int] = None) -> None:
        if self.running:
            return
        self._stop.clear()
        self._t = threading.Thread(target=self._loop, args=(max_frames,),
                                   name="TickScheduler", daemon=True)
        self._t.start()

    def stop(self, timeout: float = 3.0) -> None:
        self._stop.set()
        t = self._t
        if t is not None and t is not threading.current_thread():
            t.join(timeout=timeout)
        if t is None or not t.is_alive():
            self._t = None
