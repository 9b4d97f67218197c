"""Commands: install and uninstall the system service."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mdns_responder.commands._base import ResponderCommand

if TYPE_CHECKING:
    from mdns_responder.commands._context import AppContext


@click.command(
    cls=ResponderCommand,
    examples=[
        ("Install and enable the service (needs root)", "sudo mdns-responder install"),
        (
            "Install pointing at a non-default config",
            "sudo mdns-responder -c /srv/mdns/config.json install",
        ),
    ],
)
@click.pass_obj
def install(app: AppContext) -> None:
    """Install the service and write a default config if none exists."""
    from mdns_responder.services.control import ControlService

    app.emit(ControlService(app.settings).install())


@click.command(
    cls=ResponderCommand,
    examples=[(None, "sudo mdns-responder uninstall")],
)
@click.pass_obj
def uninstall(app: AppContext) -> None:
    """Stop and remove the service. The config file is left in place."""
    from mdns_responder.services.control import ControlService

    app.emit(ControlService(app.settings).uninstall())
