"""CLI commands for syncwatch."""

from . import collapse, watch

__all__ = ["collapse", "watch"]
