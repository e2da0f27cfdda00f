"""Debounced reporting of changed paths for one watched root."""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Set

from loguru import logger

from syncwatch.schemas import WatchRoot
from syncwatch.sync.aggregator import collapse

# Called once per ReportSet entry with (repo id, root-relative path)
Notify = Callable[[str, str], Awaitable[None]]


class DebounceState(str, Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"


class Debouncer:
    """Buffers changed paths until no new path arrived for a full window.

    Every ingest restarts the window. When it runs out, the batch is
    collapsed and each resulting path is handed to ``notify`` in a separate
    task, so the next batch accumulates while the previous one is reported.

    ingest() and the timer callback both run on the event loop thread, so a
    path is either part of the batch being flushed or starts a new one.
    Delivery errors are published on ``failed``.
    """

    def __init__(
        self,
        root: WatchRoot,
        notify: Notify,
        window: float = 0.3,
        dir_vs_files: int = 10,
    ):
        self.root = root
        self.notify = notify
        self.window = window
        self.dir_vs_files = dir_vs_files

        self._loop = asyncio.get_running_loop()
        self._batch: List[str] = []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._deliveries: Set[asyncio.Task] = set()
        self.failed: asyncio.Future = self._loop.create_future()
        self.flush_count = 0

    @property
    def state(self) -> DebounceState:
        if self._timer is None:
            return DebounceState.IDLE
        return DebounceState.ACCUMULATING

    @property
    def pending(self) -> List[str]:
        """Paths buffered since the last flush."""
        return list(self._batch)

    def ingest(self, path: str) -> None:
        """Add a changed path and restart the quiet period."""
        if self._timer is not None:
            self._timer.cancel()
        self._batch.append(path)
        self._timer = self._loop.call_later(self.window, self._flush)

    def _flush(self) -> None:
        batch, self._batch = self._batch, []
        self._timer = None
        self.flush_count += 1

        logger.debug(f"Flushing {len(batch)} changes in {self.root.id}: {batch}")
        report = collapse(batch, self.root.directory, self.dir_vs_files)

        task = self._loop.create_task(self._deliver(report))
        self._deliveries.add(task)
        task.add_done_callback(self._delivery_done)

    async def _deliver(self, report: List[str]) -> None:
        for sub in report:
            await self.notify(self.root.id, sub)

    def _delivery_done(self, task: asyncio.Task) -> None:
        self._deliveries.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None and not self.failed.done():
            logger.error(f"Reporting changes in {self.root.id} failed: {error}")
            self.failed.set_exception(error)

    async def wait_delivered(self) -> None:
        """Wait until every flushed batch has been reported."""
        while self._deliveries:
            await asyncio.gather(*self._deliveries, return_exceptions=True)

    def close(self) -> None:
        """Drop the pending batch and cancel in-flight deliveries."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._batch = []
        for task in list(self._deliveries):
            task.cancel()
