import asyncio
import json
from datetime import date, datetime, time, timedelta, timezone

from activity_ledger.cli.main import main
from activity_ledger.cli.run import poll_loop
from activity_ledger.cli.summary import period_seconds
from activity_ledger.engine.aggregator import ActivityEngine
from activity_ledger.engine.errors import LogRead
from activity_ledger.engine.types import Config, State
from activity_ledger.providers.sleep_linux import SleepEventKind, SleepWatcher
from activity_ledger.store import StatsStore, TransitionLogReader, TransitionLogWriter


def _isolate(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


def test_period_seconds():
    totals = {"2026-03-09": 600, "2026-03-10": 1200, "2026-03-11": 60}
    today = date(2026, 3, 11)  # Wednesday

    assert period_seconds(totals, "today", today) == (60, 1)
    assert period_seconds(totals, "yesterday", today) == (1200, 1)
    assert period_seconds(totals, "week", today) == (1860, 3)


def test_record_then_summary(tmp_path, monkeypatch, capsys):
    _isolate(tmp_path, monkeypatch)

    assert main(["record", "active", "--at", "1000"]) == 0
    assert main(["record", "inactive", "--at", "1600"]) == 0

    raw = json.loads((tmp_path / "data" / "activity-ledger" / "transitions.json").read_text())
    assert raw == [{"time": 1000, "state": "active"}, {"time": 1600, "state": "inactive"}]

    assert main(["summary", "today"]) == 0
    assert "today: no data recorded" in capsys.readouterr().out


def test_clear_empties_stats(tmp_path, monkeypatch, capsys):
    _isolate(tmp_path, monkeypatch)
    path = tmp_path / "data" / "activity-ledger" / "stats.json"
    StatsStore(path).save({date.today().isoformat(): 3600})

    assert main(["summary"]) == 0
    assert "today: active 1h 0m" in capsys.readouterr().out

    assert main(["clear"]) == 0
    assert path.read_text(encoding="utf-8") == ""


def test_run_once_writes_stats(tmp_path, monkeypatch, capsys):
    _isolate(tmp_path, monkeypatch)

    assert main(["run", "--once"]) == 0
    out = capsys.readouterr().out
    assert "Active today:" in out

    totals = StatsStore(tmp_path / "data" / "activity-ledger" / "stats.json").load()
    assert date.today().isoformat() in totals


class _ExplodingReader:
    def __init__(self):
        self.calls = 0

    async def read(self) -> LogRead:
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("boom")
        return LogRead.ok([])


class _MemoryStore:
    def __init__(self, initial: dict | None = None):
        self.initial = dict(initial or {})

    def load(self) -> dict:
        return dict(self.initial)

    def save(self, totals) -> None:
        pass

    def clear(self) -> None:
        pass


def test_poll_loop_survives_failed_tick(capsys):
    reader = _ExplodingReader()
    engine = ActivityEngine(Config(uptime_fallback=False), reader=reader, store=_MemoryStore())

    asyncio.run(poll_loop(engine, poll_seconds=0.01, max_ticks=2))

    assert reader.calls == 2
    assert capsys.readouterr().out.count("Active today:") == 1


def test_poll_loop_resume_rechecks_recorded_days(tmp_path):
    day = date.today() - timedelta(days=3)
    log = tmp_path / "transitions.json"
    writer = TransitionLogWriter(log)
    writer.append(when=datetime.combine(day, time(12)), state=State.ACTIVE)
    writer.append(when=datetime.combine(day, time(13)), state=State.INACTIVE)

    engine = ActivityEngine(
        Config(uptime_fallback=False),
        reader=TransitionLogReader(log),
        store=_MemoryStore({day.isoformat(): 0}),
    )
    watcher = SleepWatcher()
    watcher.push(SleepEventKind.RESUME, datetime.now(timezone.utc))

    asyncio.run(poll_loop(engine, poll_seconds=0.01, sleep_watcher=watcher, max_ticks=1))

    assert watcher.drain() == []
    assert engine.totals[day.isoformat()] == 3600


def test_poll_loop_without_resume_keeps_recorded_days(tmp_path):
    day = date.today() - timedelta(days=3)
    log = tmp_path / "transitions.json"
    writer = TransitionLogWriter(log)
    writer.append(when=datetime.combine(day, time(12)), state=State.ACTIVE)
    writer.append(when=datetime.combine(day, time(13)), state=State.INACTIVE)

    engine = ActivityEngine(
        Config(uptime_fallback=False),
        reader=TransitionLogReader(log),
        store=_MemoryStore({day.isoformat(): 0}),
    )

    asyncio.run(poll_loop(engine, poll_seconds=0.01, sleep_watcher=SleepWatcher(), max_ticks=1))

    assert engine.totals[day.isoformat()] == 0
