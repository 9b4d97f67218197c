"""Adapter enumeration backend built on psutil.

Returns a fresh :class:`NetworkAdapter` snapshot on every call, in the
order the OS reports interfaces.
"""

from __future__ import annotations

import logging
import socket
import sys
from ipaddress import IPv4Address
from pathlib import Path

import psutil

from mdns_responder.domain.adapters import NetworkAdapter

logger = logging.getLogger(__name__)

_SYS_VIRTUAL_NET = Path("/sys/devices/virtual/net")


def _virtual_hint(name: str) -> bool:
    """OS classification: Linux lists software interfaces under sysfs."""
    if not sys.platform.startswith("linux"):
        return False
    return (_SYS_VIRTUAL_NET / name).exists()


def enumerate_adapters() -> list[NetworkAdapter]:
    """Snapshot all interfaces with their IPv4 addresses and link state."""
    addrs = psutil.net_if_addrs()
    stats = psutil.net_if_stats()

    adapters: list[NetworkAdapter] = []
    for name, entries in addrs.items():
        ipv4 = tuple(IPv4Address(e.address) for e in entries if e.family == socket.AF_INET)
        stat = stats.get(name)
        adapter = NetworkAdapter(
            name=name,
            ipv4_addresses=ipv4,
            is_up=bool(stat and stat.isup),
            virtual_hint=_virtual_hint(name),
        )
        logger.debug(
            "Adapter %s: up=%s virtual=%s ipv4=%s",
            name,
            adapter.is_up,
            adapter.is_virtual,
            ", ".join(str(a) for a in ipv4) or "-",
        )
        adapters.append(adapter)
    return adapters
