from datetime import date, datetime, timedelta, timezone

from activity_ledger.engine.cache import ResultCache
from activity_ledger.engine.finalize import DayStatus, FinalizationTracker


class _Clock:
    tz = timezone.utc

    def __init__(self):
        self.value = datetime(2026, 3, 10, 12, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.value

    def today(self) -> date:
        return self.value.date()


def test_cache_serves_value_within_ttl():
    clock = _Clock()
    cache: ResultCache[str] = ResultCache(ttl_seconds=3, clock=clock)
    calls = []

    def compute() -> str:
        calls.append(1)
        return f"value-{len(calls)}"

    assert cache.get(compute) == "value-1"
    clock.value += timedelta(seconds=2.9)
    assert cache.get(compute) == "value-1"
    assert len(calls) == 1


def test_cache_recomputes_after_ttl():
    clock = _Clock()
    cache: ResultCache[int] = ResultCache(ttl_seconds=3, clock=clock)
    counter = iter(range(10))

    assert cache.get(lambda: next(counter)) == 0
    clock.value += timedelta(seconds=3)
    assert cache.get(lambda: next(counter)) == 1


def test_cache_invalidate_and_backwards_clock():
    clock = _Clock()
    cache: ResultCache[str] = ResultCache(ttl_seconds=3, clock=clock)

    cache.get(lambda: "a")
    cache.invalidate()
    assert cache.peek() is None
    assert cache.get(lambda: "b") == "b"

    clock.value -= timedelta(seconds=1)
    assert cache.is_fresh() is False
    assert cache.get(lambda: "c") == "c"


def test_promote_is_monotonic():
    tracker = FinalizationTracker()
    assert tracker.promote("2026-03-08") is True
    assert tracker.promote("2026-03-08") is False
    assert tracker.is_finalized("2026-03-08")
    assert tracker.finalized == frozenset({"2026-03-08"})


def test_day_status_lifecycle():
    tracker = FinalizationTracker()
    totals = {"2026-03-09": 10}

    assert tracker.status("2026-03-07", totals) == DayStatus.UNSEEN
    assert tracker.status("2026-03-09", totals) == DayStatus.PROVISIONAL

    tracker.promote("2026-03-09")
    assert tracker.status("2026-03-09", totals) == DayStatus.FINALIZED
