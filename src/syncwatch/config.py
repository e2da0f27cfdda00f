"""Configuration management for syncwatch."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TARGET = "localhost:8080"
DEFAULT_DEBOUNCE_MS = 300
DEFAULT_DIR_VS_FILES = 10


class ErrorPolicy(str, Enum):
    """What to do when one watched root's pipeline fails."""

    ABORT = "abort"
    RESTART = "restart"


class WatcherConfig(BaseSettings):
    """Configuration for a syncwatch process."""

    target: str = Field(
        default=DEFAULT_TARGET,
        description="Address of the Syncthing GUI/REST endpoint",
    )

    # Authentication, applied to every request
    user: Optional[str] = Field(default=None, description="Basic auth username")
    password: Optional[str] = Field(default=None, description="Basic auth password")
    api_key: Optional[str] = Field(default=None, description="Sent as X-API-Key")
    csrf_file: Optional[Path] = Field(
        default=None, description="File holding the CSRF token (last line is used)"
    )

    # Aggregation
    debounce_ms: int = Field(
        default=DEFAULT_DEBOUNCE_MS,
        gt=0,
        description="Quiet period after the last event before changes are reported",
    )
    dir_vs_files: int = Field(
        default=DEFAULT_DIR_VS_FILES,
        ge=1,
        description="Changes below a directory needed before the directory is reported instead",
    )

    request_timeout: Optional[float] = Field(
        default=30.0, description="Timeout in seconds for REST requests, None to wait forever"
    )

    on_error: ErrorPolicy = Field(
        default=ErrorPolicy.ABORT,
        description="abort: stop everything when a root fails; restart: restart that root only",
    )
    restart_delay: float = Field(default=1.0, ge=0)

    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="SYNCWATCH_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def debounce_window(self) -> float:
        """Debounce window in seconds."""
        return self.debounce_ms / 1000

    @property
    def base_url(self) -> str:
        """Target as a URL, http:// unless a scheme was given."""
        if "://" in self.target:
            return self.target.rstrip("/")
        return f"http://{self.target}"

    @property
    def csrf_token(self) -> Optional[str]:
        """Read the CSRF token from csrf_file, if configured."""
        if not self.csrf_file:
            return None
        lines = self.csrf_file.expanduser().read_text(encoding="utf-8").splitlines()
        return lines[-1] if lines else None
