"""Subcommand modules for mdns-responder.

Provides register_commands() which uses deferred imports to keep
``mdns-responder --help`` fast; zeroconf and psutil only load when a
command that needs them runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all commands on the root CLI group."""
    from mdns_responder.commands.discover import discover
    from mdns_responder.commands.install import install, uninstall
    from mdns_responder.commands.run import run
    from mdns_responder.commands.service import service
    from mdns_responder.commands.status import status
    from mdns_responder.commands.validate import validate

    cli.add_command(run)
    cli.add_command(install)
    cli.add_command(uninstall)
    cli.add_command(status)
    cli.add_command(validate)

    # --- Hidden ---
    cli.add_command(service)
    cli.add_command(discover)
