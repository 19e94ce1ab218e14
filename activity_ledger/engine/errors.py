from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .types import TransitionEvent


class LogReadKind(Enum):
    OK = "ok"
    # Log not created yet (first run). Means zero activity.
    ABSENT = "absent"
    # Unparseable content, e.g. a write in progress by the producer.
    MALFORMED = "malformed"


@dataclass(frozen=True)
class LogRead:
    """Outcome of one transition log read.

    Expected absence and malformed content are values, not exceptions, so the
    aggregator can apply a different policy to each.
    """

    kind: LogReadKind
    events: list[TransitionEvent] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def ok(cls, events: list[TransitionEvent]) -> LogRead:
        return cls(kind=LogReadKind.OK, events=events)

    @classmethod
    def absent(cls) -> LogRead:
        return cls(kind=LogReadKind.ABSENT)

    @classmethod
    def malformed(cls, error: str) -> LogRead:
        return cls(kind=LogReadKind.MALFORMED, error=error)


class ReconstructionError(Exception):
    """Internal invariant violated while rebuilding active intervals."""


class StatsStoreError(Exception):
    """The per-day stats mapping could not be persisted."""
