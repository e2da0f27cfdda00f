"""Common test fixtures."""

import asyncio
from pathlib import Path
from typing import List, Tuple

import pytest

from syncwatch.schemas import WatchRoot


class RecordingNotifier:
    """Stands in for SyncthingClient.rescan and records every call."""

    def __init__(self):
        self.calls: List[Tuple[str, str]] = []

    async def __call__(self, repo: str, sub: str) -> None:
        self.calls.append((repo, sub))


def source_from(*batches, hold: float = 0.3):
    """Event source yielding the given change sets, then staying quiet for ``hold`` seconds."""

    async def source(directory: str, watch_filter=None):
        for batch in batches:
            # like watchfiles: filtered, empty sets are not yielded
            if watch_filter is not None:
                batch = {(change, path) for change, path in batch if watch_filter(change, path)}
            if batch:
                yield batch
            await asyncio.sleep(0.01)
        await asyncio.sleep(hold)

    return source


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def root_dir(tmp_path) -> Path:
    directory = tmp_path / "repo"
    directory.mkdir()
    return directory


@pytest.fixture
def watch_root(root_dir) -> WatchRoot:
    return WatchRoot(id="default", directory=str(root_dir))


@pytest.fixture
def make_source():
    return source_from
