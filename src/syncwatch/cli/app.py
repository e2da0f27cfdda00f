from typing import Optional

import typer


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import syncwatch

        typer.echo(f"syncwatch version: {syncwatch.__version__}")
        raise typer.Exit()


app = typer.Typer(name="syncwatch")


@app.callback()
def app_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """syncwatch - report filesystem changes to Syncthing as targeted rescans."""
