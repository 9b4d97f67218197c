"""Command: advertise in the foreground until interrupted."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mdns_responder.commands._base import ResponderCommand

if TYPE_CHECKING:
    from mdns_responder.commands._context import AppContext


@click.command(
    cls=ResponderCommand,
    examples=[
        ("Advertise using the default config; Ctrl+C to stop", "mdns-responder run"),
        (
            "Use another config and a longer unregistration grace period",
            "mdns-responder -c ./config.json run --grace-timeout 10",
        ),
        ("Disable the network-change watchdog", "mdns-responder run --watch-interval 0"),
    ],
)
@click.option(
    "--grace-timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds to wait for unregistration on shutdown.",
)
@click.option(
    "--watch-interval",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds between bind-address checks (0 disables).",
)
@click.pass_obj
def run(app: AppContext, grace_timeout: float | None, watch_interval: float | None) -> None:
    """Advertise the configured service until SIGINT/SIGTERM."""
    from mdns_responder.infrastructure.signals import install_signal_handlers
    from mdns_responder.services.host import build_host

    settings = app.settings.with_overrides(
        grace_timeout=grace_timeout, watch_interval=watch_interval
    )
    host = build_host(settings)
    restore = install_signal_handlers(
        lambda name: host.coordinator.request_shutdown(f"signal {name}")
    )
    try:
        result = host.run()
    finally:
        restore()
    app.emit(result)
