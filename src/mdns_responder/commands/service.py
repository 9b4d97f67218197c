"""Command: entry point used by the service manager (hidden).

The installed service runs ``python -m mdns_responder --config <path> service``.
Under systemd the stop request arrives as SIGTERM and is translated into a
STOP control event; readiness and stopping are reported via sd_notify.  On
Windows the process is handed to the SCM dispatcher instead.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import click

from mdns_responder.commands._base import ResponderCommand
from mdns_responder.errors import ResponderError
from mdns_responder.services.result import ServiceResult

if TYPE_CHECKING:
    from mdns_responder.commands._context import AppContext


@click.command(
    cls=ResponderCommand,
    hidden=True,
    examples=[
        (
            "What the installed service runs (not meant for interactive use)",
            "python -m mdns_responder --config /etc/mdns-responder/config.json service",
        ),
    ],
)
@click.pass_obj
def service(app: AppContext) -> None:
    """Run under the service manager."""
    if sys.platform == "win32":
        app.emit(_run_windows(app))
        return

    from mdns_responder.infrastructure.notify import SystemdNotifier
    from mdns_responder.infrastructure.signals import install_signal_handlers
    from mdns_responder.services.host import ControlEvent, SystemdStatusReporter, build_host

    host = build_host(app.settings, reporter=SystemdStatusReporter(SystemdNotifier()))
    restore = install_signal_handlers(lambda _name: host.handle_control(ControlEvent.STOP))
    try:
        result = host.handle_control(ControlEvent.START)
    finally:
        restore()
    app.emit(result)


def _run_windows(app: AppContext) -> ServiceResult:
    from mdns_responder.infrastructure.windows_scm import run_service

    try:
        return run_service(app.settings)
    except ResponderError as exc:
        return ServiceResult(ok=False, op="service", error=exc.to_service_error())
