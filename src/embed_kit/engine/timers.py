"""Single-threaded timer queue behind every delay the orchestrator uses.

Nothing here sleeps. The owner calls ``fire_due()`` from its event loop (a
Playwright pump, a test clock, ...) and due callbacks run to completion in
deadline order before the next one starts.
"""
import heapq
import itertools
import logging
import time
from typing import Callable

log = logging.getLogger(__name__)


class TimerHandle:
    """Cancelable reference to one scheduled callback."""

    __slots__ = ("deadline", "callback", "label", "cancelled", "fired")

    def __init__(self, deadline: float, callback: Callable[[], None], label: str = ""):
        self.deadline = deadline
        self.callback = callback
        self.label = label
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def __repr__(self):
        state = "cancelled" if self.cancelled else "fired" if self.fired else "active"
        return f"<TimerHandle {self.label or '?'} at {self.deadline:.3f} {state}>"


class TimerQueue:
    """Min-heap of deadlines against an injectable monotonic clock."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._heap: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._clock()

    def call_later(self, delay: float, callback: Callable[[], None], label: str = "") -> TimerHandle:
        handle = TimerHandle(self._clock() + max(0.0, delay), callback, label)
        heapq.heappush(self._heap, (handle.deadline, next(self._seq), handle))
        return handle

    def next_deadline(self) -> float | None:
        """Deadline of the earliest active timer, or None when idle."""
        while self._heap and not self._heap[0][2].active:
            heapq.heappop(self._heap)
        return self._heap[0][0] if self._heap else None

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._heap if h.active)

    def active_labels(self) -> list[str]:
        return sorted(h.label for _, _, h in self._heap if h.active)

    def fire_due(self) -> int:
        """Run every timer whose deadline has passed. Returns the number fired.

        Timers scheduled by a callback run in the same call only if already due.
        """
        fired = 0
        while True:
            deadline = self.next_deadline()
            if deadline is None or deadline > self._clock():
                return fired
            _, _, handle = heapq.heappop(self._heap)
            handle.fired = True
            fired += 1
            handle.callback()
