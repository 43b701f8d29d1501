"""CLI command for running a one-shot election.

Usage:
    elector elect --key daily-job
    elector elect --key daily-job --ttl 10000 --id worker-3
    elector elect --key daily-job --cleanup

Exit codes: 0 leader, 1 follower, 3 store error. Scripts can gate a job
on the result:

    elector elect --key nightly-backup && ./run_backup.sh
"""

from __future__ import annotations

import asyncio

import typer
from pymongo.errors import PyMongoError
from rich.console import Console

from elector.config import settings
from elector.errors import ElectionError
from elector.leader import Leader
from elector.observability.logging import LogContext, configure_logging
from elector.store.mongo import MongoElectionStore, close_client

EXIT_FOLLOWER = 1
EXIT_STORE_ERROR = 3

app = typer.Typer(help="Run a one-shot leader election")


@app.callback(invoke_without_command=True)
def elect(
    key: str = typer.Option(
        settings.election_key,
        "--key",
        "-k",
        help="Election group name shared by all candidates",
    ),
    ttl: int = typer.Option(
        settings.election_ttl_ms,
        "--ttl",
        "-t",
        help="Election record TTL in milliseconds (minimum 5000)",
    ),
    candidate_id: str | None = typer.Option(
        settings.candidate_id,
        "--id",
        help="Candidate ID (random if omitted)",
    ),
    cleanup: bool = typer.Option(
        False,
        "--cleanup/--no-cleanup",
        help="If elected, wait out the TTL and drop the election group",
    ),
    log_level: str = typer.Option(
        settings.log_level,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
    json_logs: bool = typer.Option(
        settings.log_json,
        "--json-logs/--console-logs",
        help="Emit JSON log lines",
    ),
) -> None:
    """Register as a candidate and report whether this instance leads.

    Prints "leader" or "follower" on stdout.
    """
    configure_logging(json_format=json_logs, level=log_level)
    is_leader = asyncio.run(_elect(key, ttl, candidate_id, cleanup))
    if not is_leader:
        raise typer.Exit(code=EXIT_FOLLOWER)


async def _elect(
    key: str,
    ttl: int,
    candidate_id: str | None,
    cleanup: bool,
) -> bool:
    """Async implementation of elect command."""
    console = Console()
    err_console = Console(stderr=True)
    try:
        store = MongoElectionStore.from_settings()
    except PyMongoError as e:
        # Bad URI or client options
        err_console.print(f"[red]Election failed:[/red] {e}")
        close_client()
        raise typer.Exit(code=EXIT_STORE_ERROR) from e

    leader = Leader(store, id=candidate_id, ttl_ms=ttl, key=key)

    with LogContext(candidate_id=leader.id, group_key=leader.group_key):
        try:
            await leader.initialize()
            is_leader = await leader.elect()
            console.print("leader" if is_leader else "follower")

            if is_leader and cleanup:
                await leader.cleanup()
        except (ElectionError, PyMongoError) as e:
            err_console.print(f"[red]Election failed:[/red] {e}")
            raise typer.Exit(code=EXIT_STORE_ERROR) from e
        finally:
            close_client()

    return is_leader
