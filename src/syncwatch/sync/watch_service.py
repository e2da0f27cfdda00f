"""Watch service for one watched root."""

import asyncio
import os
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator, Callable, List, Optional, Set, Tuple

from loguru import logger
from pydantic import BaseModel
from watchfiles import Change, awatch

from syncwatch.exceptions import EventSourceError
from syncwatch.schemas import WatchRoot
from syncwatch.sync.aggregator import is_directory_event
from syncwatch.sync.debouncer import Debouncer, Notify

Changes = Set[Tuple[Change, str]]
WatchFilter = Callable[[Change, str], bool]
# called with the root directory and watch_filter=
EventSource = Callable[..., AsyncIterator[Changes]]


def watchfiles_source(
    directory: str, watch_filter: Optional[WatchFilter] = None
) -> AsyncIterator[Changes]:
    """Raw change sets for ``directory`` from watchfiles.

    watchfiles only groups events over a very short step here; the real
    quiet period is applied by the Debouncer.
    """
    return awatch(
        directory, watch_filter=watch_filter, debounce=50, step=10, recursive=True
    )


class WatchServiceState(BaseModel):
    running: bool = False
    start_time: Optional[datetime] = None
    event_count: int = 0
    last_event: Optional[datetime] = None
    last_error: Optional[str] = None


class WatchService:
    """Feeds filesystem events for one root into its Debouncer."""

    def __init__(
        self,
        root: WatchRoot,
        notify: Notify,
        window: float = 0.3,
        dir_vs_files: int = 10,
        event_source: EventSource = watchfiles_source,
    ):
        self.root = root
        self.notify = notify
        self.window = window
        self.dir_vs_files = dir_vs_files
        self.event_source = event_source
        self.state = WatchServiceState()
        self.debouncer: Optional[Debouncer] = None

    async def run(self) -> None:
        """Watch until the event source ends or the pipeline fails.

        Raises:
            EventSourceError: the notifier backend failed
            SyncthingAPIError: reporting a batch of changes failed
        """
        self.debouncer = Debouncer(self.root, self.notify, self.window, self.dir_vs_files)
        self.state.running = True
        self.state.start_time = datetime.now()
        logger.info(f"Watching {self.root.id}: {self.root.directory}")

        events = asyncio.ensure_future(self._consume_events())
        try:
            done, _ = await asyncio.wait(
                {events, self.debouncer.failed}, return_when=asyncio.FIRST_COMPLETED
            )
            for future in done:
                future.result()
        except Exception as e:
            self.state.last_error = str(e)
            raise
        finally:
            events.cancel()
            self.debouncer.close()
            self.state.running = False

    async def _consume_events(self) -> None:
        try:
            async for changes in self.event_source(
                self.root.directory, watch_filter=self.filter_changes
            ):
                paths = await asyncio.to_thread(self.mark_directories, changes)
                for path in paths:
                    self.handle_change(path)
        except Exception as e:
            logger.error(f"Event source for {self.root.id} failed: {e}")
            raise EventSourceError(f"Watching {self.root.directory} failed: {e}") from e

    def filter_changes(self, change: Change, path: str) -> bool:
        """Ignore Syncthing's own temporary files"""
        name = Path(path).name
        if name.endswith(".tmp") and name.startswith((".syncthing.", "~syncthing~")):
            return False
        return True

    def mark_directories(self, changes: Changes) -> List[str]:
        """Paths of a change set, directories with a trailing separator.

        Stats every path, so it runs in a worker thread, once per change set.
        """
        paths = []
        for change, path in sorted(changes, key=lambda item: item[1]):
            # deleted directories can't be told apart from files anymore
            if change != Change.deleted and not is_directory_event(path) and os.path.isdir(path):
                path = path + os.sep
            paths.append(path)
        return paths

    def handle_change(self, path: str) -> None:
        """Pass one changed path on to the debouncer."""
        logger.debug(f"Event: {path}")
        self.state.event_count += 1
        self.state.last_event = datetime.now()
        self.debouncer.ingest(path)
