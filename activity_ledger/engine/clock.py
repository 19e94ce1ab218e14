from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Protocol


class Clock(Protocol):
    """Source of the current wall time and local calendar date.

    `tz` is the zone used for day boundaries; None means the system local zone.
    """

    tz: tzinfo | None

    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    tz: tzinfo | None = None

    def now(self) -> datetime:
        return datetime.now().astimezone()

    def today(self) -> date:
        return date.today()

