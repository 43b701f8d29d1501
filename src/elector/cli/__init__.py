"""CLI commands for elector.

Provides command-line interface using Typer:
- elector elect: Run a one-shot election against MongoDB
- elector group-key: Print the collection name for a group

Usage:
    elector --help
    elector elect --key daily-job --cleanup
    elector group-key daily-job
"""

import typer

from elector.cli.elect_cmd import app as elect_app
from elector.cli.group_key_cmd import app as group_key_app

# Main CLI application
app = typer.Typer(
    name="elector",
    help="elector: one-shot leader election over MongoDB",
    no_args_is_help=True,
)

app.add_typer(elect_app, name="elect")
app.add_typer(group_key_app, name="group-key")


@app.callback()
def callback() -> None:
    """elector: one-shot leader election over MongoDB."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
