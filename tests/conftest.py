import pytest

from pacing.config import get_settings
from pacing.scheduler import VirtualScheduler


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> VirtualScheduler:
    return VirtualScheduler()


class Recorder:
    """Callable that remembers its arguments and echoes the first one."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __call__(self, *args, **kwargs):
        self.calls.append(args + tuple(sorted(kwargs.items())))
        return args[0] if args else None

    @property
    def args(self) -> list:
        return [c[0] for c in self.calls]


@pytest.fixture
def fn() -> Recorder:
    return Recorder()
