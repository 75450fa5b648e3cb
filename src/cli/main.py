"""CLI entry point (Typer).

Runs the action outside the job framework: credentials and `ADDRESS` are
read from the process environment (or `.env`) and turned into a job context.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli import doctor
from cli.ui_components import build_result_table, print_banner
from core.config import AppSettings, build_context_from_env
from core.domain.errors import ActionError
from core.services.group_membership import UnassignUserFromGroupAction

app = typer.Typer(
    no_args_is_help=True,
    help="Remove an Okta user from a group.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=False, show_path=False)],
    )


def _emit(record: dict[str, Any], *, as_json: bool, title: str) -> None:
    if as_json:
        typer.echo(json.dumps(record, indent=2))
    else:
        _console.print(build_result_table(record, title=title))


@app.command()
def invoke(
    user_id: str = typer.Option(..., "--user-id", "-u", help="Okta user ID."),
    group_id: str = typer.Option(..., "--group-id", "-g", help="Okta group ID."),
    address: Optional[str] = typer.Option(
        None, "--address", "-a", help="Okta base URL (defaults to ADDRESS)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Remove a user from a group."""

    settings = AppSettings()
    configure_logging(settings.log_level)
    if not as_json:
        print_banner(_console)

    params: dict[str, Any] = {"userId": user_id, "groupId": group_id}
    if address:
        params["address"] = address

    action = UnassignUserFromGroupAction(settings=settings)
    context = build_context_from_env(settings)
    try:
        result = asyncio.run(action.invoke(params, context))
    except ActionError as exc:
        _err_console.print(f"[red]{exc.message}[/red]")
        if exc.status_code is not None:
            _err_console.print(f"[dim]HTTP status: {exc.status_code}[/dim]")
        raise typer.Exit(code=1) from exc

    _emit(result, as_json=as_json, title="Group membership removed")


@app.command()
def halt(
    reason: str = typer.Option(..., "--reason", "-r", help="Why the job is halted."),
    user_id: Optional[str] = typer.Option(None, "--user-id", "-u"),
    group_id: Optional[str] = typer.Option(None, "--group-id", "-g"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Acknowledge a halt request (no cleanup is needed)."""

    settings = AppSettings()
    configure_logging(settings.log_level)

    params: dict[str, Any] = {"reason": reason, "userId": user_id, "groupId": group_id}
    action = UnassignUserFromGroupAction(settings=settings)
    result = asyncio.run(action.halt(params))
    _emit(result, as_json=as_json, title="Halt acknowledged")


def run() -> None:
    app()
