"""
Single-shot timer scheduler driven by the simulation clock
"""

from __future__ import annotations

import heapq
from itertools import count
from typing import Callable, List, Tuple


class TimerHandle:
    """Cancel token returned by ``TimerScheduler.schedule``"""

    __slots__ = ("fire_at", "action", "cancelled", "fired")

    def __init__(self, fire_at: float, action: Callable[[], None]) -> None:
        self.fire_at = fire_at
        self.action = action
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class TimerScheduler:
    """Queue of ``(fire_at, seq, handle)`` entries fired by ``advance``.

    Callbacks run synchronously inside ``advance`` and may schedule further
    timers; those fire in the same call when already due.
    """

    def __init__(self, now_ms: float = 0.0) -> None:
        self.now = now_ms
        self._seq = count()
        self._queue: List[Tuple[float, int, TimerHandle]] = []

    def schedule(self, delay_ms: float, action: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self.now + max(0.0, delay_ms), action)
        heapq.heappush(self._queue, (handle.fire_at, next(self._seq), handle))
        return handle

    def cancel(self, handle: TimerHandle) -> bool:
        """Cancel a pending timer. Already fired/cancelled handles are a no-op."""
        if handle is None or not handle.pending:
            return False
        handle.cancelled = True
        return True

    def cancel_all(self) -> int:
        cancelled = 0
        for _, _, handle in self._queue:
            if self.cancel(handle):
                cancelled += 1
        self._queue.clear()
        return cancelled

    def advance(self, now_ms: float) -> int:
        """Move the clock to ``now_ms`` and fire every due timer in order"""
        fired = 0
        while self._queue and self._queue[0][0] <= now_ms:
            fire_at, _, handle = heapq.heappop(self._queue)
            if not handle.pending:
                continue
            self.now = fire_at
            handle.fired = True
            handle.action()
            fired += 1
        self.now = max(self.now, now_ms)
        return fired

    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if handle.pending)
