import asyncio
import logging

from activity_ledger.engine.aggregator import ActivityEngine
from activity_ledger.engine.types import Config
from activity_ledger.providers.sleep_linux import SleepWatcher
from activity_ledger.providers.uptime import UptimeProvider
from activity_ledger.store import StatsStore, TransitionLogReader, load_config

logger = logging.getLogger(__name__)


def _validate_config(*, poll_seconds: float, cache_ttl_seconds: float) -> None:
    if poll_seconds <= 0:
        raise ValueError("poll_seconds must be > 0")
    if cache_ttl_seconds >= poll_seconds:
        raise ValueError("cache_ttl_seconds must be < poll_seconds")


def build_engine(config: Config) -> ActivityEngine:
    return ActivityEngine(
        config,
        reader=TransitionLogReader(config.transition_log),
        store=StatsStore(config.stats_file),
        uptime=UptimeProvider(),
    )


async def poll_loop(
    engine: ActivityEngine,
    *,
    poll_seconds: float,
    sleep_watcher: SleepWatcher | None = None,
    max_ticks: int | None = None,
) -> None:
    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        if sleep_watcher is not None and sleep_watcher.resumed_since_last_drain():
            engine.request_catch_up()

        try:
            text = await engine.tick()
        except Exception:
            # A failed tick must not stop the timer; the next one retries.
            logger.exception("tick failed")
        else:
            print(f"Active today: {text}", flush=True)

        ticks += 1
        if max_ticks is not None and ticks >= max_ticks:
            break
        await asyncio.sleep(poll_seconds)


def main(once: bool = False) -> int:
    config, config_meta = load_config()
    _validate_config(poll_seconds=config.poll_seconds, cache_ttl_seconds=config.cache_ttl_seconds)

    print("Starting activity-ledger run mode (Ctrl+C to stop)")
    print(f"Config: {config_meta.get('path')}")
    if config_meta.get("error"):
        print(f"Config error: {config_meta.get('error')}")

    engine = build_engine(config)

    sleep_watcher: SleepWatcher | None = None
    if not once:
        sleep_watcher = SleepWatcher()
        if not sleep_watcher.start():
            message = "Sleep watcher: disabled (dbus unavailable)"
            if sleep_watcher.last_error():
                message = f"Sleep watcher: disabled ({sleep_watcher.last_error()})"
            print(message)
            sleep_watcher = None

    try:
        asyncio.run(
            poll_loop(
                engine,
                poll_seconds=config.poll_seconds,
                sleep_watcher=sleep_watcher,
                max_ticks=1 if once else None,
            )
        )
    except KeyboardInterrupt:
        print("\nStopping...")

    if engine.last_error:
        print(engine.last_error)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
