"""Run one watch pipeline per root and decide what a failure takes down."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Sequence

from loguru import logger

from syncwatch.config import ErrorPolicy
from syncwatch.exceptions import PipelineError
from syncwatch.schemas import WatchRoot
from syncwatch.sync.watch_service import WatchService


@dataclass
class PipelineFailure:
    root: WatchRoot
    error: BaseException
    timestamp: datetime = field(default_factory=datetime.now)


class WatchSupervisor:
    """Runs a WatchService for every root.

    With ErrorPolicy.ABORT the first failure cancels every other pipeline and
    raises PipelineError. With ErrorPolicy.RESTART only the failed root is
    started again after ``restart_delay`` seconds.
    """

    def __init__(
        self,
        roots: Sequence[WatchRoot],
        service_factory: Callable[[WatchRoot], WatchService],
        policy: ErrorPolicy = ErrorPolicy.ABORT,
        restart_delay: float = 1.0,
    ):
        self.roots = list(roots)
        self.service_factory = service_factory
        self.policy = policy
        self.restart_delay = restart_delay
        self.failures: List[PipelineFailure] = []
        self.services: Dict[str, WatchService] = {}

    async def run(self) -> None:
        if not self.roots:
            logger.warning("No repositories configured, nothing to watch")
            return

        tasks = [asyncio.create_task(self._run_pipeline(root)) for root in self.roots]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            for task in done:
                task.result()
            # nothing failed, wait for the remaining pipelines to end
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run_pipeline(self, root: WatchRoot) -> None:
        while True:
            service = self.service_factory(root)
            self.services[root.id] = service
            try:
                await service.run()
                return
            except Exception as e:
                self.failures.append(PipelineFailure(root=root, error=e))
                if self.policy == ErrorPolicy.ABORT:
                    logger.error(f"Watching {root.id} failed, stopping: {e}")
                    raise PipelineError(root.id, e) from e

                logger.error(f"Watching {root.id} failed, restarting in {self.restart_delay}s: {e}")
                await asyncio.sleep(self.restart_delay)
