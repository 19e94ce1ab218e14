from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final


class State(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


DEFAULT_POLL_SECONDS: Final[float] = 5.0
DEFAULT_HISTORY_DAYS: Final[int] = 7
DEFAULT_CACHE_TTL_SECONDS: Final[float] = 3.0


@dataclass
class Config:
    poll_seconds: float = DEFAULT_POLL_SECONDS
    history_days: int = DEFAULT_HISTORY_DAYS
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    uptime_fallback: bool = True
    transition_log: Path | None = None
    stats_file: Path | None = None


@dataclass(frozen=True)
class TransitionEvent:
    wall_time: int
    state: State
