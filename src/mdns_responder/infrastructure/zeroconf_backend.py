"""Discovery-protocol backend built on python-zeroconf.

Each registration owns a :class:`zeroconf.Zeroconf` instance bound to the
selected interface address, so a re-registration on a new address never
shares sockets with the old one.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from ipaddress import IPv4Address
from typing import Any

from zeroconf import ServiceBrowser, ServiceInfo, ServiceStateChange, Zeroconf

logger = logging.getLogger(__name__)

_RESOLVE_TIMEOUT_MS = 1500


@dataclass
class ZeroconfRegistration:
    """Backend token for one live advertisement."""

    zeroconf: Zeroconf
    info: ServiceInfo


@dataclass(frozen=True)
class DiscoveredService:
    """A resolved service instance seen while browsing."""

    name: str
    server: str | None
    addresses: tuple[str, ...]
    port: int | None
    properties: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "server": self.server,
            "addresses": list(self.addresses),
            "port": self.port,
            "properties": dict(self.properties),
        }


def _decode_properties(raw: Mapping[bytes, bytes | None]) -> dict[str, str]:
    decoded: dict[str, str] = {}
    for key, value in raw.items():
        decoded[key.decode("utf-8", "replace")] = (
            value.decode("utf-8", "replace") if value is not None else ""
        )
    return decoded


class ZeroconfBackend:
    """Register, unregister and browse DNS-SD services over mDNS."""

    def __init__(self) -> None:
        self._live: list[ZeroconfRegistration] = []
        self._lock = threading.Lock()

    def register(
        self,
        service_type: str,
        instance_name: str,
        hostname: str,
        port: int,
        bind_ip: IPv4Address,
        txt_records: Mapping[str, str],
    ) -> ZeroconfRegistration:
        info = ServiceInfo(
            type_=service_type,
            name=f"{instance_name}.{service_type}",
            addresses=[bind_ip.packed],
            port=port,
            properties=dict(txt_records),
            server=hostname,
        )
        zc = Zeroconf(interfaces=[str(bind_ip)])
        try:
            zc.register_service(info)
        except Exception:
            zc.close()
            raise
        registration = ZeroconfRegistration(zeroconf=zc, info=info)
        with self._lock:
            self._live.append(registration)
        logger.debug("zeroconf registered %s on %s", info.name, bind_ip)
        return registration

    def unregister(self, token: ZeroconfRegistration) -> None:
        with self._lock:
            if token in self._live:
                self._live.remove(token)
        try:
            token.zeroconf.unregister_service(token.info)
        finally:
            token.zeroconf.close()
        logger.debug("zeroconf unregistered %s", token.info.name)

    def close(self) -> None:
        """Close any instance still open (registrations never unregistered)."""
        with self._lock:
            leftovers, self._live = self._live, []
        for registration in leftovers:
            registration.zeroconf.close()

    def browse(self, service_type: str, timeout: float) -> list[DiscoveredService]:
        """Browse for *service_type* for *timeout* seconds and resolve results."""
        seen: list[str] = []
        lock = threading.Lock()

        def on_change(
            zeroconf: Zeroconf,
            service_type: str,
            name: str,
            state_change: ServiceStateChange,
        ) -> None:
            if state_change is ServiceStateChange.Added:
                with lock:
                    if name not in seen:
                        seen.append(name)

        zc = Zeroconf()
        try:
            browser = ServiceBrowser(zc, service_type, handlers=[on_change])
            time.sleep(timeout)
            browser.cancel()

            with lock:
                names = list(seen)
            found: list[DiscoveredService] = []
            for name in names:
                info = zc.get_service_info(service_type, name, timeout=_RESOLVE_TIMEOUT_MS)
                if info is None:
                    logger.debug("Could not resolve %s", name)
                    continue
                found.append(
                    DiscoveredService(
                        name=name,
                        server=info.server,
                        addresses=tuple(info.parsed_addresses()),
                        port=info.port,
                        properties=_decode_properties(info.properties),
                    )
                )
            return found
        finally:
            zc.close()
