from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time as dt_time, timedelta, tzinfo

from .errors import ReconstructionError
from .types import State, TransitionEvent


def day_bounds(day: date, tz: tzinfo | None = None) -> tuple[int, int]:
    """Return the epoch seconds of local midnight at the start and end of `day`.

    With `tz=None` the naive datetimes are resolved in the system local zone.
    Days are not assumed to be 86400s long (DST transitions).
    """
    start = datetime.combine(day, dt_time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), dt_time.min, tzinfo=tz)

    start_ts = int(start.timestamp())
    end_ts = int(end.timestamp())
    if end_ts <= start_ts:
        raise ReconstructionError(f"empty day window for {day.isoformat()}")
    return start_ts, end_ts


def _span(start: int, end: int) -> int:
    # Out-of-order input can produce an inverted span; it contributes nothing.
    return max(0, end - start)


def _check(event: TransitionEvent) -> None:
    if isinstance(event.wall_time, bool) or not isinstance(event.wall_time, int):
        raise ReconstructionError(f"non-integer event time: {event.wall_time!r}")
    if not isinstance(event.state, State):
        raise ReconstructionError(f"unknown event state: {event.state!r}")


def carry_in_state(events: Iterable[TransitionEvent], day_start: int) -> State | None:
    """State of the last event logged before `day_start`, if any."""
    carry: State | None = None
    for event in events:
        _check(event)
        if event.wall_time < day_start:
            carry = event.state
    return carry


def active_seconds(
    events: Sequence[TransitionEvent],
    day: date,
    *,
    now: int | None = None,
    tz: tzinfo | None = None,
) -> int:
    """Total active seconds within the local calendar day `day`.

    Events are replayed in the order given; they are neither sorted nor
    deduplicated. An interval still open after the last event is closed at
    `now` (clamped into the day) when given, otherwise at the end of the day.
    """
    day_start, day_end = day_bounds(day, tz)

    open_since: int | None = None
    if carry_in_state(events, day_start) == State.ACTIVE:
        open_since = day_start

    total = 0
    for event in events:
        if event.wall_time < day_start or event.wall_time >= day_end:
            continue

        if event.state == State.ACTIVE:
            if open_since is None:
                open_since = event.wall_time
        elif open_since is not None:
            total += _span(open_since, event.wall_time)
            open_since = None

    if open_since is not None:
        close_at = day_end if now is None else min(max(now, day_start), day_end)
        total += _span(open_since, close_at)

    return total


def format_hm(seconds: int) -> str:
    s = max(0, int(seconds))
    return f"{s // 3600}h {(s % 3600) // 60}m"
