"""Utility functions for syncwatch."""

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure loguru sinks:
    - stderr at the requested level
    - optional rotating log file, always at DEBUG
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), backtrace=True, diagnose=False)

    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level="DEBUG", rotation="10 MB", retention="7 days")


def get_home_dir() -> str:
    """Home directory of the current user, or an empty string if none is set."""
    if sys.platform == "win32":
        home = os.path.join(os.environ.get("HOMEDRIVE", ""), os.environ.get("HOMEPATH", ""))
        if not home:
            home = os.environ.get("USERPROFILE", "")
    else:
        home = os.environ.get("HOME", "")

    if not home:
        logger.warning("No home directory found - set $HOME (or the platform equivalent).")
    return home


def expand_tilde(path: str) -> str:
    """Expand a leading ``~`` or ``~/`` against the home directory.

    ``~user`` forms are left untouched.
    """
    if path == "~":
        return get_home_dir()

    path = path.replace("/", os.sep)
    if not path.startswith("~" + os.sep):
        return path
    return os.path.join(get_home_dir(), path[2:])
