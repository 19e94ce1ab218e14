from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from activity_ledger.engine.errors import LogRead
from activity_ledger.engine.types import State, TransitionEvent
from activity_ledger.store.paths import default_transition_log_path

logger = logging.getLogger(__name__)


def parse_events(text: str) -> list[TransitionEvent]:
    """Parse a JSON array of `{"time": <epoch secs>, "state": ...}` records.

    Raises ValueError on anything that is not exactly that shape.
    """
    raw = json.loads(text)
    if not isinstance(raw, list):
        raise ValueError(f"expected a JSON array, got {type(raw).__name__}")

    events: list[TransitionEvent] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"record {index} is not an object")

        wall_time = item.get("time")
        if isinstance(wall_time, bool) or not isinstance(wall_time, int):
            raise ValueError(f"record {index} has no integer 'time'")

        try:
            state = State(item.get("state"))
        except ValueError:
            raise ValueError(f"record {index} has unknown state {item.get('state')!r}") from None

        events.append(TransitionEvent(wall_time=wall_time, state=state))
    return events


def _event_to_dict(event: TransitionEvent) -> dict:
    return {"time": event.wall_time, "state": event.state.value}


@dataclass
class TransitionLogReader:
    path: Path | None = None

    def _resolve(self) -> Path:
        return self.path or default_transition_log_path()

    def read_sync(self) -> LogRead:
        path = self._resolve()
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return LogRead.absent()
        except OSError as e:
            return LogRead.malformed(f"read failed: {e}")
        except UnicodeDecodeError as e:
            # Partially written multibyte sequence.
            return LogRead.malformed(f"not valid UTF-8: {e}")

        try:
            return LogRead.ok(parse_events(text))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too.
            return LogRead.malformed(str(e))

    async def read(self) -> LogRead:
        """Read the log in a worker thread so the event loop keeps running."""
        return await asyncio.to_thread(self.read_sync)


@dataclass
class TransitionLogWriter:
    """Producer-side helper that appends records to the log."""

    path: Path | None = None

    def append(self, *, when: datetime | int, state: State) -> Path:
        path = self.path or default_transition_log_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        events: list[TransitionEvent] = []
        if path.exists():
            text = path.read_text(encoding="utf-8")
            if text.strip():
                # Never rewrite a log we cannot fully understand.
                events = parse_events(text)

        wall_time = int(when.timestamp()) if isinstance(when, datetime) else int(when)
        events.append(TransitionEvent(wall_time=wall_time, state=state))

        payload = json.dumps([_event_to_dict(e) for e in events], separators=(",", ":"))

        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            f.write(payload)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_path, path)
        logger.debug("appended %s at %d to %s", state.value, wall_time, path)
        return path
