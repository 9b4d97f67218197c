"""Rich Console factory and discovery table rendering.

Consoles render to a StringIO buffer, preserving the ``-> str`` contract
of the formatter layer.  In non-TTY environments (tests, pipes) Rich
disables color codes automatically.
"""

from __future__ import annotations

from io import StringIO
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

RESPONDER_THEME = Theme(
    {
        "mdns.ok": "bold green",
        "mdns.error": "bold red",
        "mdns.warning": "bold yellow",
        "mdns.name": "bold cyan",
        "mdns.addr": "bold blue",
        "mdns.key": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=RESPONDER_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def render_services(
    services: list[dict[str, Any]],
    *,
    service_type: str,
    no_color: bool = False,
) -> str:
    """Render browse results as a table, one row per resolved instance."""
    console = create_console(no_color=no_color)
    if not services:
        console.print(f"[mdns.warning]No {service_type} services found[/]")
        return get_output(console)

    table = Table(title=f"{service_type} ({len(services)} found)", title_justify="left")
    table.add_column("Instance", style="mdns.name")
    table.add_column("Host")
    table.add_column("Address", style="mdns.addr")
    table.add_column("Port", justify="right")
    table.add_column("TXT", style="mdns.key")
    for service in services:
        txt = "\n".join(f"{k}={v}" for k, v in service.get("properties", {}).items())
        table.add_row(
            service["name"].removesuffix(f".{service_type}"),
            service.get("server") or "-",
            ", ".join(service.get("addresses", [])) or "-",
            str(service.get("port") or "-"),
            txt,
        )
    console.print(table)
    return get_output(console)
