from __future__ import annotations

from datetime import date, timedelta

from activity_ledger.engine.intervals import format_hm
from activity_ledger.store import StatsStore, load_config


def _week_start(today: date) -> date:
    # ISO week (Mon start)
    return today - timedelta(days=today.weekday())


def period_seconds(totals: dict[str, int], period: str, today: date) -> tuple[int, int]:
    """Return (active seconds, days with a record) for `period`."""
    period_norm = (period or "today").strip().lower()

    if period_norm in {"today", ""}:
        days = [today]
    elif period_norm == "yesterday":
        days = [today - timedelta(days=1)]
    elif period_norm == "week":
        start = _week_start(today)
        days = [start + timedelta(days=i) for i in range((today - start).days + 1)]
    else:
        raise SystemExit(f"Unknown period: {period}")

    seconds = 0
    recorded = 0
    for day in days:
        value = totals.get(day.isoformat())
        if value is None:
            continue
        seconds += value
        recorded += 1
    return seconds, recorded


def main(period: str = "today", *, today: date | None = None) -> int:
    config, _ = load_config(create_if_missing=False)
    totals = StatsStore(config.stats_file).load()

    label = (period or "today").strip().lower() or "today"
    seconds, recorded = period_seconds(totals, label, today or date.today())

    if recorded == 0:
        print(f"{label}: no data recorded")
        return 0

    print(f"{label}: active {format_hm(seconds)}")
    return 0
