from __future__ import annotations

import logging
from datetime import datetime

from activity_ledger.engine.errors import StatsStoreError
from activity_ledger.engine.types import State
from activity_ledger.store import StatsStore, TransitionLogWriter, load_config

logger = logging.getLogger(__name__)


def main(state: str, at: int | None = None) -> int:
    config, _ = load_config(create_if_missing=False)
    writer = TransitionLogWriter(config.transition_log)

    when: datetime | int = at if at is not None else datetime.now().astimezone()
    try:
        path = writer.append(when=when, state=State(state))
    except (OSError, ValueError) as e:
        print(f"record failed: {e}")
        return 1

    print(f"recorded {state} in {path}")
    return 0


def clear_main() -> int:
    config, _ = load_config(create_if_missing=False)
    try:
        path = StatsStore(config.stats_file).clear()
    except StatsStoreError as e:
        print(f"clear failed: {e}")
        return 1

    # A running tracker keeps its in-memory totals and rewrites them on its next save.
    logger.debug("cleared %s", path)
    print("Statistics cleared")
    return 0
