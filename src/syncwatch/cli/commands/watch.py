"""Command module for watching repositories and listing them."""

import asyncio
from pathlib import Path
from typing import Optional

import httpx
import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from syncwatch.cli.app import app
from syncwatch.client import SyncthingClient, create_client
from syncwatch.config import ErrorPolicy, WatcherConfig
from syncwatch.schemas import Configuration, WatchRoot
from syncwatch.sync import WatchService, WatchSupervisor
from syncwatch.sync.watch_service import EventSource, watchfiles_source
from syncwatch.utils import setup_logging

console = Console()


def load_config(**overrides) -> WatcherConfig:
    """Settings from the environment, with CLI options that were given on top."""
    return WatcherConfig(**{key: value for key, value in overrides.items() if value is not None})


def build_supervisor(
    config: WatcherConfig,
    client: SyncthingClient,
    configuration: Configuration,
    event_source: EventSource = watchfiles_source,
) -> WatchSupervisor:
    roots = [WatchRoot.from_repository(repo) for repo in configuration.repositories]

    def service_factory(root: WatchRoot) -> WatchService:
        return WatchService(
            root,
            notify=client.rescan,
            window=config.debounce_window,
            dir_vs_files=config.dir_vs_files,
            event_source=event_source,
        )

    return WatchSupervisor(
        roots,
        service_factory,
        policy=config.on_error,
        restart_delay=config.restart_delay,
    )


async def run_watch(
    config: WatcherConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    event_source: EventSource = watchfiles_source,
) -> WatchSupervisor:
    """Load the repositories from Syncthing and watch all of them."""
    async with create_client(config, transport=transport) as client:
        configuration = await client.get_config()
        supervisor = build_supervisor(config, client, configuration, event_source)
        await supervisor.run()
        return supervisor


async def fetch_configuration(
    config: WatcherConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> Configuration:
    async with create_client(config, transport=transport) as client:
        return await client.get_config()


def display_repositories(configuration: Configuration) -> None:
    table = Table(title=f"Syncthing configuration (version {configuration.version})")
    table.add_column("ID", style="cyan")
    table.add_column("Directory")
    table.add_column("Read only")
    table.add_column("Rescan interval (s)", justify="right")

    for repo in configuration.repositories:
        table.add_row(
            repo.id,
            repo.directory,
            "yes" if repo.read_only else "no",
            str(repo.rescan_interval_s),
        )
    console.print(table)


@app.command()
def watch(
    target: Optional[str] = typer.Option(None, "--target", help="Syncthing address, host:port"),
    user: Optional[str] = typer.Option(None, "--user", help="Username"),
    password: Optional[str] = typer.Option(None, "--pass", help="Password"),
    csrf_file: Optional[Path] = typer.Option(None, "--csrf", help="CSRF token file"),
    api_key: Optional[str] = typer.Option(None, "--api", help="API key"),
    debounce_ms: Optional[int] = typer.Option(
        None, "--debounce", help="Quiet period in milliseconds before changes are reported"
    ),
    dir_vs_files: Optional[int] = typer.Option(
        None, "--dir-vs-files", help="Changes in a directory before the directory is rescanned"
    ),
    on_error: Optional[ErrorPolicy] = typer.Option(
        None, "--on-error", help="Stop everything or restart the failed repository"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every event."),
) -> None:
    """Watch every Syncthing repository and request rescans of what changed."""
    try:
        config = load_config(
            target=target,
            user=user,
            password=password,
            csrf_file=csrf_file,
            api_key=api_key,
            debounce_ms=debounce_ms,
            dir_vs_files=dir_vs_files,
            on_error=on_error,
            log_level="DEBUG" if verbose else None,
        )
        setup_logging(config.log_level, config.log_file)
        asyncio.run(run_watch(config))

    except KeyboardInterrupt:
        typer.echo("Exiting")
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.error(f"Watch failed: {e}")
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
        raise


@app.command()
def repos(
    target: Optional[str] = typer.Option(None, "--target", help="Syncthing address, host:port"),
    user: Optional[str] = typer.Option(None, "--user", help="Username"),
    password: Optional[str] = typer.Option(None, "--pass", help="Password"),
    csrf_file: Optional[Path] = typer.Option(None, "--csrf", help="CSRF token file"),
    api_key: Optional[str] = typer.Option(None, "--api", help="API key"),
) -> None:
    """List the repositories Syncthing reports."""
    try:
        config = load_config(
            target=target, user=user, password=password, csrf_file=csrf_file, api_key=api_key
        )
        configuration = asyncio.run(fetch_configuration(config))
        display_repositories(configuration)
    except Exception as e:
        logger.error(f"Error reading configuration: {e}")
        typer.echo(f"Error reading configuration: {e}", err=True)
        raise typer.Exit(1)
