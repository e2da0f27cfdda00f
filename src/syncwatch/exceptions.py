class SyncWatchError(Exception):
    """Base exception for syncwatch"""

    pass


class ConfigurationError(SyncWatchError):
    """Raised when the remote configuration cannot be loaded or parsed"""

    pass


class SyncthingAPIError(SyncWatchError):
    """Raised when a request to the Syncthing REST API fails"""

    pass


class EventSourceError(SyncWatchError):
    """Raised when the filesystem notifier for a watched root fails"""

    pass


class PipelineError(SyncWatchError):
    """Raised when a watch pipeline fails and the error policy is to abort"""

    def __init__(self, repo: str, error: BaseException):
        self.repo = repo
        self.error = error
        super().__init__(f"Watching {repo} failed: {error}")
