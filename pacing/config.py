from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from pacing.scheduler import AsyncioScheduler, Scheduler, ThreadingScheduler


class PacingSettings(BaseSettings):
    """Library defaults, read from ``PACING_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="PACING_")

    debounce_delay_ms: float = 500
    scheduler: Literal["threading", "asyncio"] = "threading"


@lru_cache(maxsize=1)
def get_settings() -> PacingSettings:
    return PacingSettings()


def default_scheduler() -> Scheduler:
    match get_settings().scheduler:
        case "asyncio":
            return AsyncioScheduler()
        case _:
            return ThreadingScheduler()
