"""Main CLI entry point for syncwatch."""  # pragma: no cover

from syncwatch.cli.app import app  # pragma: no cover
from syncwatch.utils import setup_logging  # pragma: no cover

# Register commands
from syncwatch.cli.commands import collapse, watch  # pragma: no cover

__all__ = ["collapse", "watch"]  # pragma: no cover


# Set up logging when module is imported
setup_logging()  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
