from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from activity_ledger.engine.errors import StatsStoreError
from activity_ledger.store.paths import default_stats_path

logger = logging.getLogger(__name__)


def _valid_key(key: str) -> bool:
    try:
        date.fromisoformat(key)
    except ValueError:
        return False
    return True


@dataclass
class StatsStore:
    """Whole-value persisted mapping of `YYYY-MM-DD` to active seconds.

    The file holds a single string: a JSON object, or empty after a clear.
    """

    path: Path | None = None

    def _resolve(self) -> Path:
        return self.path or default_stats_path()

    def load(self) -> dict[str, int]:
        path = self._resolve()
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("stats read failed (%s): %s", path, e)
            return {}
        except UnicodeDecodeError as e:
            logger.warning("stats file is not valid UTF-8 (%s): %s", path, e)
            return {}

        if not text.strip():
            return {}

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("stats file is not valid JSON (%s): %s", path, e)
            return {}

        if not isinstance(raw, dict):
            logger.warning("stats file is not a JSON object (%s)", path)
            return {}

        totals: dict[str, int] = {}
        for key, value in raw.items():
            if isinstance(value, bool) or not isinstance(value, int):
                continue
            if value < 0 or not _valid_key(key):
                continue
            totals[key] = value
        return totals

    def _write(self, text: str) -> Path:
        path = self._resolve()
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            raise StatsStoreError(f"cannot write {path}: {e}") from e
        return path

    def save(self, totals: Mapping[str, int]) -> Path:
        payload = {key: int(totals[key]) for key in sorted(totals)}
        return self._write(json.dumps(payload, indent=2) + "\n")

    def clear(self) -> Path:
        return self._write("")
