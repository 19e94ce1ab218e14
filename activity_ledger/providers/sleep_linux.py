from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from queue import Empty, Queue
from threading import Event, Thread

logger = logging.getLogger(__name__)


class SleepEventKind(Enum):
    SUSPEND = "suspend"
    RESUME = "resume"


@dataclass(frozen=True)
class SleepEvent:
    kind: SleepEventKind
    when: datetime


class SleepWatcher:
    """Queues logind suspend/resume notifications for the poll loop.

    A resume tells the loop that wall time may have jumped over one or more
    midnights, so the engine is asked to recheck every open day.
    """

    def __init__(self):
        self._queue: Queue[SleepEvent] = Queue()
        self._thread: Thread | None = None
        self._started = False
        self._ready = Event()
        self._available = False
        self._last_error: str | None = None

    def start(self) -> bool:
        if self._started:
            return self._available

        self._started = True
        self._thread = Thread(target=self._run, name="activity-ledger-sleep", daemon=True)
        self._thread.start()
        self._ready.wait(timeout=2.0)
        return self._available

    def last_error(self) -> str | None:
        return self._last_error

    def push(self, kind: SleepEventKind, when: datetime | None = None) -> None:
        self._queue.put(SleepEvent(kind=kind, when=when or datetime.now().astimezone()))

    def drain(self) -> list[SleepEvent]:
        events: list[SleepEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except Empty:
                break
        return events

    def resumed_since_last_drain(self) -> bool:
        resumed = False
        for event in self.drain():
            logger.info("system %s at %s", event.kind.value, event.when.isoformat())
            if event.kind == SleepEventKind.RESUME:
                resumed = True
        return resumed

    def _run(self) -> None:
        try:
            asyncio.run(self._listen())
        except Exception as exc:
            # Runs on a daemon thread; surface the failure through last_error().
            self._last_error = str(exc)
            self._available = False
            self._ready.set()

    async def _listen(self) -> None:
        from dbus_next.aio import MessageBus
        from dbus_next.constants import BusType

        bus = await MessageBus(bus_type=BusType.SYSTEM).connect()
        introspection = await bus.introspect("org.freedesktop.login1", "/org/freedesktop/login1")
        obj = bus.get_proxy_object(
            "org.freedesktop.login1", "/org/freedesktop/login1", introspection
        )
        manager = obj.get_interface("org.freedesktop.login1.Manager")

        def handler(sleeping: bool) -> None:
            self.push(SleepEventKind.SUSPEND if sleeping else SleepEventKind.RESUME)

        manager.on_prepare_for_sleep(handler)  # type: ignore[attr-defined]
        self._available = True
        self._ready.set()
        await asyncio.get_running_loop().create_future()
