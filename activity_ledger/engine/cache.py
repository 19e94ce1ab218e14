from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from .clock import Clock

T = TypeVar("T")


@dataclass
class _Entry(Generic[T]):
    value: T
    computed_at: datetime


class ResultCache(Generic[T]):
    """Single-value memo with a short TTL.

    Only throttles what display callers see; persisted totals are written on
    every tick regardless.
    """

    def __init__(self, *, ttl_seconds: float, clock: Clock):
        self._ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entry: _Entry[T] | None = None

    def is_fresh(self) -> bool:
        if self._entry is None:
            return False
        elapsed = (self._clock.now() - self._entry.computed_at).total_seconds()
        # A clock stepping backwards counts as expired.
        return 0 <= elapsed < self._ttl_seconds

    def get(self, compute: Callable[[], T]) -> T:
        if self._entry is not None and self.is_fresh():
            return self._entry.value

        value = compute()
        self._entry = _Entry(value=value, computed_at=self._clock.now())
        return value

    def peek(self) -> T | None:
        return self._entry.value if self._entry is not None else None

    def invalidate(self) -> None:
        self._entry = None
