# services/scheduler.py

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

def monotonic_ms() -> float:
    return time.monotonic() * 1000

@dataclass(order=True)
class ScheduledCall:
    deadline: float
    seq: int
    action: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True

class Scheduler:
    """
    Pending (deadline, action) pairs on a single timeline.

    Time only moves when the owner advances it: tests step it by hand, the
    HTTP layer calls ``pump()`` which catches up with the wall clock. Actions
    fire in deadline order (ties in scheduling order) and never after they
    were cancelled.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock
        self._now = clock() if clock else 0.0
        self._queue: List[ScheduledCall] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for call in self._queue if not call.cancelled)

    def call_later(self, delay_ms: float, action: Callable[[], None]) -> ScheduledCall:
        if delay_ms < 0:
            raise ValueError("delay must be non-negative")
        call = ScheduledCall(self._now + delay_ms, next(self._counter), action)
        heapq.heappush(self._queue, call)
        return call

    def cancel_all(self) -> None:
        for call in self._queue:
            call.cancelled = True
        self._queue = []

    def advance(self, delay_ms: float) -> None:
        self.advance_to(self._now + delay_ms)

    def advance_to(self, target: float) -> None:
        while self._queue and self._queue[0].deadline <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self._now = max(self._now, call.deadline)
            call.action()
        self._now = max(self._now, target)

    def pump(self) -> None:
        if self._clock is not None:
            self.advance_to(self._clock())

    def run_until_idle(self, max_calls: int = 10000) -> None:
        fired = 0
        while self._queue:
            if fired >= max_calls:
                logger.warning("Scheduler stopped after %d calls with work still pending", fired)
                return
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self._now = max(self._now, call.deadline)
            call.action()
            fired += 1
