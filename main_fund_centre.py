"""Mini README: Entry point CLI for the Shuttlefund ledger.

This script exposes a Typer CLI to serve the JSON API with uvicorn, print the
current fund and member balances, and add members to the roster. Storage and
logging settings come from ``SHUTTLEFUND_`` environment variables or a
``.env`` file.
"""

from __future__ import annotations

import typer
import uvicorn

from shuttlefund.balances import summarise_ledger
from shuttlefund.configuration import get_settings
from shuttlefund.logging_utils import configure_root_logger
from shuttlefund.service import LedgerStore
from shuttlefund.sync import REGISTRY

cli = typer.Typer(help="Track the badminton group's shared costs and fund.")


def _open_store() -> LedgerStore:
    settings = get_settings()
    configure_root_logger(settings.log_level)
    repository = REGISTRY.create(settings.storage_backend, settings)
    store = LedgerStore(repository, initial_members=settings.initial_members)
    store.pull()
    return store


@cli.command()
def serve(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # Browsers cannot open the 0.0.0.0 wildcard, so point them at localhost.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting Shuttlefund on {effective_host}:{effective_port}.\n"
        f"API docs at http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "shuttlefund.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def balances() -> None:
    """Print the remaining fund and every member's balance."""

    summary = summarise_ledger(_open_store().state)
    typer.echo(f"Fund: {summary['total_fund']:,}")
    for member, balance in summary["member_balances"].items():
        typer.echo(f"  {member}: {balance:+,}")


@cli.command("add-member")
def add_member(name: str = typer.Argument(..., help="Name to add to the roster.")) -> None:
    """Add a member to the roster and save the snapshot."""

    store = _open_store()
    before = store.state
    after = store.add_member(name)
    if after is before:
        typer.echo(f"{name.strip() or name!r} was not added (blank, duplicate or reserved).")
        raise typer.Exit(code=1)
    typer.echo(f"Added {name.strip()}. Roster: {', '.join(after.members)}")
    if store.sync_status == "error":
        typer.echo("Warning: the change was not saved to storage; see the log.", err=True)


if __name__ == "__main__":
    cli()
