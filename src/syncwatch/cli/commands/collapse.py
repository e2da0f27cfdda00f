"""Show which rescans a set of changed paths would produce."""

from typing import List

import typer
from rich.console import Console
from rich.tree import Tree

from syncwatch.cli.app import app
from syncwatch.config import DEFAULT_DIR_VS_FILES
from syncwatch.sync.aggregator import LEAF, score_paths
from syncwatch.sync.aggregator import collapse as collapse_paths

console = Console()


def display_scores(paths: List[str], root: str, dir_vs_files: int) -> None:
    """Print the score of every tracked path as a tree."""
    tree = Tree(f"[bold]Scores[/bold] (threshold {dir_vs_files})")
    for path, score in sorted(score_paths(paths, root, dir_vs_files).items()):
        if score == LEAF:
            tree.add(f"[yellow]{path}[/yellow] (changed)")
        elif score > dir_vs_files:
            tree.add(f"[green]{path}[/green] {score}")
        else:
            tree.add(f"[dim]{path}[/dim] {score}")
    console.print(tree)


@app.command()
def collapse(
    paths: List[str] = typer.Argument(..., help="Changed paths, a trailing / marks a directory"),
    root: str = typer.Option("", "--root", help="Watched directory the paths are inside"),
    dir_vs_files: int = typer.Option(DEFAULT_DIR_VS_FILES, "--dir-vs-files", min=1),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show directory scores."),
) -> None:
    """Print the rescans a batch of changed paths collapses to, one per line."""
    if verbose:
        display_scores(paths, root, dir_vs_files)

    for sub in collapse_paths(paths, root, dir_vs_files):
        # "." is the whole root
        typer.echo(sub or ".")
