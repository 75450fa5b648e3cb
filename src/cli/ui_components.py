"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("OKTA UNASSIGN", style="bold cyan")
    subtitle = Text("Remove user from group", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_result_table(record: dict[str, Any], *, title: str) -> Table:
    """Tabla clave/valor para un registro de resultado (invoke o halt)."""

    table = Table(title=title)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for key, value in record.items():
        style = "green" if value is True else None
        table.add_row(key, Text(str(value), style=style or ""))
    return table
