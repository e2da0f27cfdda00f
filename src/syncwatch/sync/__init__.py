from .aggregator import collapse, score_paths
from .debouncer import Debouncer, DebounceState
from .watch_service import WatchService
from .supervisor import WatchSupervisor, PipelineFailure

__all__ = [
    "collapse",
    "score_paths",
    "Debouncer",
    "DebounceState",
    "WatchService",
    "WatchSupervisor",
    "PipelineFailure",
]
