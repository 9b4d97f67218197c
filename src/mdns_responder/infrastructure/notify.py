"""sd_notify(3) client: report readiness and stop progress to systemd.

A no-op outside systemd (no ``$NOTIFY_SOCKET``), so the same code runs in
the foreground and under the service manager.
"""

from __future__ import annotations

import logging
import os
import socket

logger = logging.getLogger(__name__)


class SystemdNotifier:
    """Send ``KEY=value`` datagrams to the systemd notification socket."""

    def __init__(self, address: str | None = None) -> None:
        self._address = address if address is not None else os.environ.get("NOTIFY_SOCKET")

    @property
    def enabled(self) -> bool:
        return bool(self._address)

    def notify(self, *assignments: str) -> bool:
        """Send *assignments* (e.g. ``"READY=1"``). Returns False when not sent."""
        if not self._address or not assignments:
            return False
        address = self._address
        if address.startswith("@"):
            address = "\0" + address[1:]  # abstract namespace
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM) as sock:
                sock.connect(address)
                sock.sendall("\n".join(assignments).encode("utf-8"))
        except OSError as exc:
            logger.debug("sd_notify failed: %s", exc)
            return False
        return True
