from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class DayStatus(Enum):
    UNSEEN = "unseen"
    PROVISIONAL = "provisional"
    FINALIZED = "finalized"


class FinalizationTracker:
    """Set of day keys whose totals are frozen for the rest of the process.

    Membership only grows. It is rebuilt empty on every start, so after a
    restart the two most recent days can be revised once more.
    """

    def __init__(self):
        self._finalized: set[str] = set()

    @property
    def finalized(self) -> frozenset[str]:
        return frozenset(self._finalized)

    def promote(self, key: str) -> bool:
        """Freeze `key`. Returns False if it was already frozen."""
        if key in self._finalized:
            return False
        self._finalized.add(key)
        return True

    def is_finalized(self, key: str) -> bool:
        return key in self._finalized

    def status(self, key: str, totals: Mapping[str, int]) -> DayStatus:
        if key in self._finalized:
            return DayStatus.FINALIZED
        if key in totals:
            return DayStatus.PROVISIONAL
        return DayStatus.UNSEEN
