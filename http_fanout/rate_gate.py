"""Permit source that paces request launches."""

import threading
import time
from typing import Callable, Optional


class RateGate:
    """
    Ticking clock that releases at most one permit per 1/rate seconds.

    The first permit is granted immediately and permits are never banked: a
    caller that comes back late gets a permit right away, but the one after it
    still waits a full interval. With rate 0 acquire() never blocks.
    """

    def __init__(self, per_second: int, clock: Callable[[], float] = time.perf_counter,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize rate gate.

        Args:
            per_second: Target permits per second (0 = unlimited)
            clock: Monotonic clock in seconds
            sleep: Function used to wait for the next tick
        """
        if per_second < 0:
            raise ValueError("per_second must be >= 0")
        self.per_second = per_second
        self.interval = 1.0 / per_second if per_second > 0 else 0.0
        self._clock = clock
        self._sleep = sleep
        self._next_tick: Optional[float] = None
        self.lock = threading.Lock()

    @property
    def unlimited(self) -> bool:
        return self.per_second == 0

    def acquire(self) -> None:
        """Block until the next permit is available."""
        if self.unlimited:
            return

        with self.lock:
            now = self._clock()
            tick = now if self._next_tick is None else max(self._next_tick, now)
            self._next_tick = tick + self.interval

        # Sleep outside the lock; the slot is already reserved
        wait = tick - self._clock()
        if wait > 0:
            self._sleep(wait)
