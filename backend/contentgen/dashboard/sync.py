import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from contentgen.core.config import settings
from contentgen.data_service import BackendDataService
from contentgen.realtime import ANY_EVENT, ChangeEvent, Subscription

logger = logging.getLogger(__name__)


class RealtimeSync:
    """
    Keeps a list view fresh by refetching whenever one of its tables changes.

    Change-feed callbacks may fire on any thread, so they only hand the event
    to this mount's queue on the event loop. A drain task turns queued events
    into refetches, coalescing bursts that arrive within `debounce` seconds.
    """

    def __init__(
        self,
        data: BackendDataService,
        tables: Sequence[str],
        refetch: Callable[[], Awaitable[Any]],
        *,
        event_type: str = ANY_EVENT,
        debounce: float | None = None,
    ):
        self.data = data
        self.tables = list(dict.fromkeys(tables))
        self.refetch = refetch
        self.event_type = event_type
        self.debounce = settings.REALTIME_DEBOUNCE_SECONDS if debounce is None else debounce
        self.refetch_count = 0
        self._subscriptions: list[Subscription] = []
        self._queue: asyncio.Queue[ChangeEvent] | None = None
        self._drain_task: asyncio.Task | None = None

    @property
    def mounted(self) -> bool:
        return self._drain_task is not None

    @property
    def subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions)

    async def mount(self) -> None:
        if self.mounted:
            return
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()

        # Bound to this mount's queue so a stale callback can never feed a later mount.
        def on_change(event: ChangeEvent) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(queue.put_nowait, event)

        self._queue = queue
        self._subscriptions = [
            self.data.subscribe(table, on_change, event_type=self.event_type) for table in self.tables
        ]
        self._drain_task = asyncio.create_task(self._drain(queue))
        logger.info("Realtime sync mounted on %s (%s)", ", ".join(self.tables), self.event_type)

    async def unmount(self) -> None:
        for subscription in self._subscriptions:
            subscription.close()
        self._subscriptions = []

        task, self._drain_task = self._drain_task, None
        self._queue = None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            logger.info("Realtime sync unmounted from %s", ", ".join(self.tables))

    async def flush(self) -> None:
        """Wait until every event delivered so far has been turned into a refetch."""
        queue = self._queue
        if queue is None:
            return
        # let pending call_soon_threadsafe handoffs land first
        await asyncio.sleep(0)
        await queue.join()

    async def _drain(self, queue: asyncio.Queue[ChangeEvent]) -> None:
        while True:
            event = await queue.get()
            handled = 1
            if self.debounce > 0:
                await asyncio.sleep(self.debounce)
                while not queue.empty():
                    queue.get_nowait()
                    handled += 1

            try:
                await self.refetch()
            except Exception as exc:
                logger.warning("Refetch after %s change on %s failed: %s", event.event_type, event.table, exc)
            finally:
                self.refetch_count += 1
                for _ in range(handled):
                    queue.task_done()

    async def __aenter__(self) -> "RealtimeSync":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.unmount()
