"""Command: report the service manager's view of the service."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mdns_responder.commands._base import ResponderCommand

if TYPE_CHECKING:
    from mdns_responder.commands._context import AppContext


@click.command(
    cls=ResponderCommand,
    examples=[
        (None, "mdns-responder status"),
        ("Machine-readable state", "mdns-responder --json status"),
    ],
)
@click.pass_obj
def status(app: AppContext) -> None:
    """Show whether the service is installed and running."""
    from mdns_responder.services.control import ControlService

    app.emit(ControlService(app.settings).status())
