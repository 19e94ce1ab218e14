from __future__ import annotations

import logging
from datetime import datetime, time as dt_time

import psutil

logger = logging.getLogger(__name__)


class UptimeProvider:
    """Best-effort screen time estimate from system boot time.

    Advisory only: used for display before any transition log exists and
    never written into the stats mapping.
    """

    def __init__(self):
        self._boot_time: float | None = None
        self._last_error: str | None = None

    def last_error(self) -> str | None:
        return self._last_error

    def boot_time(self) -> float | None:
        if self._boot_time is None:
            try:
                self._boot_time = float(psutil.boot_time())
            except (OSError, RuntimeError) as e:
                self._last_error = f"boot_time unavailable: {e}"
                logger.debug(self._last_error)
                return None
        return self._boot_time

    def active_estimate(self, now: datetime) -> int | None:
        """Seconds since boot, counted from local midnight at the latest."""
        boot = self.boot_time()
        if boot is None:
            return None

        midnight = datetime.combine(now.date(), dt_time.min, tzinfo=now.tzinfo)
        start = max(boot, midnight.timestamp())
        return max(0, int(now.timestamp() - start))
