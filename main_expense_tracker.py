"""Mini README: Entry point CLI for the expense tracker.

This script exposes a Typer CLI that starts the FastAPI dashboard with
configurable host, port and production flags, and can export a stored
ledger to a JSON file without starting the server.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from expensetracker.configuration import get_settings
from expensetracker.finance import LedgerEngine, PersistenceError
from expensetracker.logging_utils import configure_root_logger, level_for_environment
from expensetracker.services import JsonFileStore, StaticIdentity

cli = typer.Typer(help="Launch and manage the expense tracker.")


@cli.command()
def run(
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
    configure_root_logger(level_for_environment(settings.environment))

    # Browsers cannot open 0.0.0.0, so point them at localhost instead.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting expense tracker on {effective_host}:{effective_port}.\n"
        f"Open your browser at http://{browser_host}:{effective_port}"
    )
    uvicorn.run(
        "expensetracker.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def export(
    user: str = typer.Argument(..., help="User whose ledger should be exported."),
    output: Optional[Path] = typer.Option(
        None, help="Destination file (defaults to expenses-<user>.json)."
    ),
) -> None:
    """Write a user's stored ledger and budget summary to a JSON file."""

    settings = get_settings()
    configure_root_logger(level_for_environment(settings.environment))
    engine = LedgerEngine(
        StaticIdentity(user),
        JsonFileStore(settings.store_path),
        key_prefix=settings.storage_key_prefix,
    )
    try:
        found = engine.load()
    except PersistenceError as error:
        typer.echo(f"Could not read ledger: {error}", err=True)
        raise typer.Exit(code=1) from error
    if not found:
        typer.echo(f"No stored ledger for {user}", err=True)
        raise typer.Exit(code=1)

    destination = output or Path(f"expenses-{user}.json")
    destination.write_text(
        json.dumps(engine.export_snapshot(), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    typer.echo(f"Exported {len(engine.transactions)} transactions to {destination}")


if __name__ == "__main__":
    cli()
