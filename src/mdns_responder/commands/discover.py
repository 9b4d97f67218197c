"""Command: browse the LAN for DNS-SD services (hidden diagnostic)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mdns_responder.commands._base import ResponderCommand
from mdns_responder.services.diagnostics import DEFAULT_BROWSE_TYPE

if TYPE_CHECKING:
    from mdns_responder.commands._context import AppContext


@click.command(
    cls=ResponderCommand,
    hidden=True,
    examples=[
        ("Look for SMB advertisements for 3 seconds", "mdns-responder discover"),
        (
            "Browse another type for longer",
            "mdns-responder discover --service-type _http._tcp.local. --timeout 10",
        ),
    ],
)
@click.option(
    "--service-type",
    default=DEFAULT_BROWSE_TYPE,
    show_default=True,
    help="DNS-SD service type to browse.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=3.0,
    show_default=True,
    help="Seconds to listen before resolving.",
)
@click.pass_obj
def discover(app: AppContext, service_type: str, timeout: float) -> None:
    """Browse for advertised services and print what resolves."""
    from mdns_responder.infrastructure.zeroconf_backend import ZeroconfBackend
    from mdns_responder.output.console import render_services
    from mdns_responder.services.diagnostics import discover as browse

    result = browse(ZeroconfBackend(), service_type, timeout)
    if app.settings.json_output:
        app.emit(result)
        return
    click.echo(render_services(result.data["services"], service_type=service_type), nl=False)
