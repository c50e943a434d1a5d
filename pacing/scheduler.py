import asyncio
import heapq
import itertools
import logging
import threading
import time
from typing import Callable, Protocol

log = logging.getLogger(__name__)

Callback = Callable[[], object]


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Timer service used by the debounce and throttle wrappers.

    All durations and timestamps are in milliseconds.
    """

    def now(self) -> float:
        ...

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        ...


class ThreadingScheduler:
    """Runs callbacks on `threading.Timer` threads."""

    def now(self) -> float:
        return time.monotonic() * 1000

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        t = threading.Timer(delay / 1000, callback)
        t.daemon = True
        t.start()
        return t


class AsyncioScheduler:
    """Runs callbacks on an asyncio event loop.

    :param loop: Loop to schedule on. Defaults to the loop running at the time
        of each call.
    """

    def __init__(self, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time() * 1000

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        return self.loop.call_later(delay / 1000, callback)


class _VirtualTimer:
    def __init__(self, when: float, callback: Callback) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """Deterministic clock for tests and simulations.

    Time only moves when `advance` is called. Callbacks due at the same
    instant run in the order they were scheduled, and exceptions raised by a
    callback propagate out of `advance`.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[tuple[float, int, _VirtualTimer]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        timer = _VirtualTimer(self._now + max(delay, 0), callback)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, ms: float) -> None:
        if ms < 0:
            raise RuntimeError(f"cannot move virtual time backwards by {ms}ms")

        deadline = self._now + ms
        while self._queue and self._queue[0][0] <= deadline:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = when
            timer.callback()
        self._now = deadline

    def advance_to(self, when: float) -> None:
        self.advance(when - self._now)
