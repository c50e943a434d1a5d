import logging
import threading
from functools import partial, update_wrapper
from types import MethodType
from typing import Any, Callable, Generic, ParamSpec, TypeVar

from pacing.config import default_scheduler, get_settings
from pacing.scheduler import Scheduler, TimerHandle

log = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

ResultCallback = Callable[[Any], object]
Call = tuple[tuple[Any, ...], dict[str, Any]]


class _Paced(Generic[P, R]):
    """Shared single-timer state of a debounced or throttled callable.

    State is only touched while holding ``_lock``; the wrapped function and
    result callbacks always run outside of it.
    """

    def __init__(
        self,
        func: Callable[P, R],
        wait: float,
        result: ResultCallback | None,
        scheduler: Scheduler | None,
    ) -> None:
        self._func = func
        self._wait = wait
        self._result = result
        self._scheduler = scheduler if scheduler is not None else default_scheduler()
        self._lock = threading.Lock()
        self._timer: TimerHandle | None = None
        self._call: Call | None = None
        # bumped whenever the timer is replaced so late callbacks are ignored
        self._token = 0
        update_wrapper(self, func, updated=())

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def cancel(self) -> None:
        """Drop the scheduled call, if any. Safe to call at any time."""
        with self._lock:
            self._clear()

    def _clear(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            log.debug(f"{self} timer cancelled")
        self._timer = None
        self._call = None
        self._token += 1

    def _arm(self, call: Call | None, delay: float | None = None) -> None:
        self._clear()
        self._call = call
        self._timer = self._scheduler.call_later(
            self._wait if delay is None else delay,
            partial(self._expire, self._token),
        )

    def _expire(self, token: int) -> None:
        with self._lock:
            if token != self._token:
                return
            call = self._call
            self._timer = None
            self._call = None
            self._token += 1
            self._settle()

        if call is None:
            log.debug(f"{self} window closed")
            return

        args, kwargs = call
        log.debug(f"{self} firing trailing call")
        self._run_deferred(*args, **kwargs)

    def _settle(self) -> None:
        pass

    def _run_deferred(self, *args: Any, **kwargs: Any) -> None:
        raise NotImplementedError()

    def _rebind(self, func: Callable[..., R]) -> "_Paced[..., R]":
        raise NotImplementedError()

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        # each instance gets its own timer; cached in the instance dict so
        # later lookups bypass this descriptor
        bound = self._rebind(MethodType(self._func, obj))
        obj.__dict__[self.name] = bound
        return bound

    def _invoke(self, *args: Any, **kwargs: Any) -> R:
        res = self._func(*args, **kwargs)
        if self._result is not None:
            self._result(res)
        return res

    @property
    def name(self) -> str:
        return getattr(self._func, "__name__", repr(self._func))

    def __str__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


class Debounced(_Paced[P, R]):
    """Collapses bursts of calls separated by less than `delay` ms.

    Without `leading`, only the last call of a burst runs, `delay` ms after
    it was made. With `leading`, the first call of a burst runs right away
    and its return value is handed to `result`; later calls in the same burst
    still run once on the trailing edge, but their values are discarded.
    """

    def __init__(
        self,
        func: Callable[P, R],
        delay: float,
        *,
        leading: bool = False,
        result: ResultCallback | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__(func, delay, result, scheduler)
        self._leading = leading

    @property
    def delay(self) -> float:
        return self._wait

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> R | None:
        with self._lock:
            idle = self._timer is None
            if self._leading and idle:
                # only closes the burst window, nothing runs on expiry
                self._arm(None)
            else:
                self._arm((args, kwargs))
                log.debug(f"{self} trailing call in {self._wait}ms")
                return None

        log.debug(f"{self} firing leading call")
        return self._invoke(*args, **kwargs)

    def _run_deferred(self, *args: Any, **kwargs: Any) -> None:
        self._func(*args, **kwargs)

    def _rebind(self, func: Callable[..., R]) -> "Debounced[..., R]":
        return Debounced(
            func,
            self._wait,
            leading=self._leading,
            result=self._result,
            scheduler=self._scheduler,
        )


class Throttled(_Paced[P, R]):
    """Runs at most once every `interval` ms.

    A call made after the interval has elapsed runs immediately and returns
    its value. With `trailing`, calls made inside the interval schedule one
    more run when the interval ends, with the latest arguments. `result` receives
    the value of every run.
    """

    def __init__(
        self,
        func: Callable[P, R],
        interval: float,
        *,
        trailing: bool = False,
        result: ResultCallback | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__(func, interval, result, scheduler)
        self._trailing = trailing
        self._last: float | None = None

    @property
    def interval(self) -> float:
        return self._wait

    @property
    def last_fired(self) -> float | None:
        return self._last

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> R | None:
        with self._lock:
            now = self._scheduler.now()
            if self._last is None or now - self._last > self._wait:
                self._clear()
                self._last = now
            elif self._timer is None:
                if self._trailing:
                    remaining = self._last + self._wait - now
                    self._arm((args, kwargs), remaining)
                    log.debug(f"{self} trailing call in {remaining}ms")
                return None
            else:
                # a trailing run is already scheduled, it takes the newest args
                self._call = (args, kwargs)
                return None

        log.debug(f"{self} firing")
        return self._invoke(*args, **kwargs)

    def _settle(self) -> None:
        self._last = self._scheduler.now()

    def _run_deferred(self, *args: Any, **kwargs: Any) -> None:
        self._invoke(*args, **kwargs)

    def _rebind(self, func: Callable[..., R]) -> "Throttled[..., R]":
        return Throttled(
            func,
            self._wait,
            trailing=self._trailing,
            result=self._result,
            scheduler=self._scheduler,
        )


def make_debounced(
    func: Callable[P, R],
    delay: float | None = None,
    *,
    leading: bool = False,
    result: ResultCallback | None = None,
    scheduler: Scheduler | None = None,
) -> Debounced[P, R]:
    """Wrap `func` so that bursts of calls collapse into one.

    :param func: Function to debounce.
    :param delay: Quiet window in milliseconds. Defaults to
        ``PacingSettings.debounce_delay_ms``.
    :param leading: Run the first call of each burst immediately.
    :param result: Receives the return value of leading calls only.
    :param scheduler: Timer service. Defaults to the configured one.

    Returns:
        Debounced: Callable with a ``cancel()`` method.
    """
    if delay is None:
        delay = get_settings().debounce_delay_ms
    return Debounced(func, delay, leading=leading, result=result, scheduler=scheduler)


def make_throttled(
    func: Callable[P, R],
    interval: float,
    *,
    trailing: bool = False,
    result: ResultCallback | None = None,
    scheduler: Scheduler | None = None,
) -> Throttled[P, R]:
    """Wrap `func` so that it runs at most once per `interval` milliseconds.

    :param func: Function to throttle.
    :param interval: Minimum time in milliseconds between immediate runs.
    :param trailing: Run the latest suppressed call at the end of the interval.
    :param result: Receives the return value of every run.
    :param scheduler: Timer service. Defaults to the configured one.

    Returns:
        Throttled: Callable with a ``cancel()`` method.
    """
    return Throttled(
        func, interval, trailing=trailing, result=result, scheduler=scheduler
    )


def debounce(
    delay: float | None = None,
    *,
    leading: bool = False,
    result: ResultCallback | None = None,
    scheduler: Scheduler | None = None,
):
    """Debounce decorator. See `make_debounced`."""

    def decorator(func: Callable[P, R]) -> Debounced[P, R]:
        return make_debounced(
            func, delay, leading=leading, result=result, scheduler=scheduler
        )

    return decorator


def throttle(
    interval: float,
    *,
    trailing: bool = False,
    result: ResultCallback | None = None,
    scheduler: Scheduler | None = None,
):
    """Throttle decorator. See `make_throttled`."""

    def decorator(func: Callable[P, R]) -> Throttled[P, R]:
        return make_throttled(
            func, interval, trailing=trailing, result=result, scheduler=scheduler
        )

    return decorator
