"""Command: check the config and show what would be advertised."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mdns_responder.commands._base import ResponderCommand

if TYPE_CHECKING:
    from mdns_responder.commands._context import AppContext


@click.command(
    cls=ResponderCommand,
    examples=[
        (None, "mdns-responder validate"),
        ("Check another file, as JSON", "mdns-responder -c ./config.json --json validate"),
    ],
)
@click.pass_obj
def validate(app: AppContext) -> None:
    """Validate the config and resolve the bind address without registering."""
    from mdns_responder.domain.adapters import AdapterSelector
    from mdns_responder.infrastructure.network import enumerate_adapters
    from mdns_responder.services.diagnostics import validate_config

    app.emit(validate_config(app.settings.config_path, AdapterSelector(enumerate_adapters)))
