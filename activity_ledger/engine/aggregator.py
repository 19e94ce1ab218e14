from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Protocol

from .cache import ResultCache
from .clock import Clock, SystemClock
from .errors import LogRead, LogReadKind, ReconstructionError, StatsStoreError
from .finalize import DayStatus, FinalizationTracker
from .intervals import active_seconds, format_hm
from .types import Config, TransitionEvent

logger = logging.getLogger(__name__)

# Days older than this many days are frozen when a midnight is crossed.
FINALIZE_AFTER_DAYS = 2


class LogSource(Protocol):
    async def read(self) -> LogRead: ...


class TotalsStore(Protocol):
    def load(self) -> dict[str, int]: ...

    def save(self, totals: dict[str, int]): ...

    def clear(self): ...


class UptimeSource(Protocol):
    def active_estimate(self, now) -> int | None: ...


class ActivityEngine:
    """Keeps per-day active totals in sync with the transition log.

    Owns the day mapping, the finalized set and the display cache. Call
    `tick()` on every poll; presentation code reads `current_total()`.
    """

    def __init__(
        self,
        config: Config,
        *,
        reader: LogSource,
        store: TotalsStore,
        clock: Clock | None = None,
        uptime: UptimeSource | None = None,
    ):
        self._config = config
        self._reader = reader
        self._store = store
        self._clock = clock or SystemClock()
        self._uptime = uptime if config.uptime_fallback else None

        self._totals: dict[str, int] = store.load()
        self._had_history = bool(self._totals)
        self._tracker = FinalizationTracker()
        self._cache: ResultCache[str] = ResultCache(
            ttl_seconds=config.cache_ttl_seconds, clock=self._clock
        )

        self._events: list[TransitionEvent] = []
        self._log_seen = False
        self._current_day: date | None = None
        self._last_error: str | None = None
        self._catch_up = False

    @property
    def totals(self) -> dict[str, int]:
        return dict(self._totals)

    @property
    def finalized(self) -> frozenset[str]:
        return self._tracker.finalized

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def current_day(self) -> date | None:
        return self._current_day

    def day_status(self, day: date) -> DayStatus:
        return self._tracker.status(day.isoformat(), self._totals)

    def request_catch_up(self) -> None:
        """Recheck every non-finalized day in the window on the next tick.

        Used after a resume from sleep: a day recorded before the suspend may
        have kept accumulating until the machine went down.
        """
        self._catch_up = True

    async def tick(self) -> str:
        """Run one poll tick and return the (cached) display string for today."""
        result = await self._reader.read()

        now = self._clock.now()
        today = self._clock.today()
        crossed = self._detect_day_boundary(today)

        changed = False
        today_seconds: int | None = None
        try:
            if result.kind is LogReadKind.MALFORMED:
                # Likely a write in progress; the next tick will see the full log.
                logger.warning("transition log unreadable, keeping totals: %s", result.error)
            else:
                try:
                    fresh = self._recompute(result.events, today, int(now.timestamp()))
                except ReconstructionError as e:
                    logger.error("interval reconstruction failed: %s", e)
                    self._last_error = f"Error: {e}"
                    return self._last_error

                if result.kind is LogReadKind.ABSENT:
                    logger.debug("transition log absent, counting zero activity")
                else:
                    self._log_seen = True
                self._events = result.events
                self._catch_up = False

                for key, seconds in fresh.items():
                    changed |= self._write_total(key, seconds)
                today_seconds = fresh[today.isoformat()]
                self._last_error = None
        finally:
            # A failed tick must not lose the promotion for this crossing.
            if crossed:
                self._finalize_old_days(today)

        if changed:
            self._persist()

        return self._cache.get(lambda: self._display(today_seconds))

    def current_total(self) -> str:
        """Display string for today, recomputed at most once per cache TTL."""
        if self._last_error is not None:
            return self._last_error
        try:
            return self._cache.get(self._display)
        except ReconstructionError as e:
            logger.error("interval reconstruction failed: %s", e)
            return f"Error: {e}"

    def clear(self) -> None:
        """Drop every recorded total, in memory and in the store."""
        self._totals.clear()
        self._cache.invalidate()
        try:
            self._store.clear()
        except StatsStoreError as e:
            logger.error("clearing stats failed: %s", e)

    def _detect_day_boundary(self, today: date) -> bool:
        previous = self._current_day
        self._current_day = today
        if previous is None or previous == today:
            return False

        logger.info("day boundary crossed: %s -> %s", previous.isoformat(), today.isoformat())
        # The cached value belongs to the old day.
        self._cache.invalidate()
        return True

    def _recompute(
        self, events: list[TransitionEvent], today: date, now_ts: int
    ) -> dict[str, int]:
        tz = self._clock.tz
        fresh = {today.isoformat(): active_seconds(events, today, now=now_ts, tz=tz)}

        for offset in range(1, self._config.history_days + 1):
            day = today - timedelta(days=offset)
            key = day.isoformat()
            if self._tracker.is_finalized(key):
                continue
            # Yesterday absorbs activity that straddled midnight; older days
            # are stable once recorded unless a catch-up was requested.
            if offset > 1 and key in self._totals and not self._catch_up:
                continue
            fresh[key] = active_seconds(events, day, tz=tz)

        return fresh

    def _write_total(self, key: str, seconds: int) -> bool:
        if self._tracker.is_finalized(key):
            return False

        previous = self._totals.get(key)
        if previous is not None and seconds < previous:
            logger.warning(
                "recomputed total for %s dropped from %ds to %ds, keeping %ds",
                key,
                previous,
                seconds,
                previous,
            )
            return False
        if previous == seconds:
            return False

        self._totals[key] = seconds
        return True

    def _finalize_old_days(self, today: date) -> None:
        key = (today - timedelta(days=FINALIZE_AFTER_DAYS)).isoformat()
        if self._tracker.promote(key):
            logger.info("finalized %s at %ss", key, self._totals.get(key, 0))

    def _persist(self) -> None:
        try:
            self._store.save(self._totals)
        except StatsStoreError as e:
            logger.error("saving stats failed, in-memory totals stay authoritative: %s", e)

    def _display(self, today_seconds: int | None = None) -> str:
        now = self._clock.now()
        today = self._clock.today()

        if not self._log_seen and not self._had_history and self._uptime is not None:
            estimate = self._uptime.active_estimate(now)
            if estimate is not None:
                return f"~{format_hm(estimate)}"

        seconds = today_seconds
        if seconds is None:
            seconds = active_seconds(
                self._events, today, now=int(now.timestamp()), tz=self._clock.tz
            )
        # Never show less than what has already been recorded for today.
        seconds = max(seconds, self._totals.get(today.isoformat(), 0))
        return format_hm(seconds)
