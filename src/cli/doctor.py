"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.auth_schemes import resolve_credential_scheme
from adapters.http_client import build_async_client
from core.config import AppSettings, build_context_from_env
from core.domain.errors import ActionError

app = typer.Typer(no_args_is_help=False, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.callback(invoke_without_command=True)
def run(
    check_connectivity: bool = typer.Option(
        False, "--check-connectivity", help="Issue a GET against the base URL."
    ),
) -> None:
    """Show the resolved configuration. Secret values are never printed."""

    settings = AppSettings()
    context = build_context_from_env(settings)

    table = Table(title="Okta Unassign Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    address = context.environment.get("ADDRESS")
    if address:
        table.add_row("Address", "OK", address.rstrip("/"))
    else:
        table.add_row("Address", "MISSING", "Set ADDRESS or pass --address to invoke")

    try:
        scheme = resolve_credential_scheme(context)
        table.add_row("Authentication", "OK", scheme.name)
    except ActionError as exc:
        table.add_row("Authentication", "FAIL", exc.message)

    table.add_row("HTTP timeout", "OK", f"{settings.http_timeout_seconds:g}s")

    if check_connectivity and address:
        ok_http, detail_http = asyncio.run(_check_http(address, settings))
        table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)
