"""CLI command for printing an election group's collection name.

Usage:
    elector group-key daily-job
"""

from __future__ import annotations

import typer

from elector.candidate import group_key_for

app = typer.Typer(help="Print the collection name used by an election group")


@app.callback(invoke_without_command=True)
def group_key(
    name: str = typer.Argument(
        "default",
        help="Election group name",
    ),
) -> None:
    """Print the collection name for NAME, e.g. to inspect or drop it by hand."""
    typer.echo(group_key_for(name))
