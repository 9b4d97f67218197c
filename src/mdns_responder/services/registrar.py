"""ServiceRegistrar: owns the single live advertisement.

INVARIANT: at most one RegistrationHandle is open.  Registering again
without unregistering first fails with ``ALREADY_REGISTERED``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from ipaddress import IPv4Address
from typing import TYPE_CHECKING, Any, Protocol

from mdns_responder.domain.txt import build_txt_records, check_txt_size
from mdns_responder.errors import RegistrationError, RegistrationErrorKind

if TYPE_CHECKING:
    from mdns_responder.config.models import ServiceConfig

logger = logging.getLogger(__name__)


class DiscoveryBackend(Protocol):
    """External discovery-protocol collaborator (see ZeroconfBackend)."""

    def register(
        self,
        service_type: str,
        instance_name: str,
        hostname: str,
        port: int,
        bind_ip: IPv4Address,
        txt_records: Mapping[str, str],
    ) -> Any: ...

    def unregister(self, token: Any) -> None: ...

    def close(self) -> None: ...


@dataclass
class RegistrationHandle:
    """Token for one active advertisement; released exactly once."""

    full_name: str
    bind_ip: IPv4Address
    txt_records: dict[str, str]
    token: Any = field(repr=False)
    released: bool = False


class ServiceRegistrar:
    """Builds the advertisement and drives the discovery backend."""

    def __init__(self, backend: DiscoveryBackend) -> None:
        self._backend = backend
        self._active: RegistrationHandle | None = None

    @property
    def active(self) -> RegistrationHandle | None:
        return self._active

    def register(self, config: ServiceConfig, bind_ip: IPv4Address) -> RegistrationHandle:
        """Advertise *config* on *bind_ip*.

        Raises:
            RegistrationError: ``ALREADY_REGISTERED``, ``TXT_TOO_LARGE`` or
                ``BACKEND`` (wrapping the collaborator's exception).
        """
        if self._active is not None:
            raise RegistrationError(
                RegistrationErrorKind.ALREADY_REGISTERED,
                f"{self._active.full_name} is already registered; unregister it first",
                service=self._active.full_name,
            )

        txt = build_txt_records(config)
        size = check_txt_size(txt)
        logger.debug("TXT record for %s: %d bytes, %d entries", config.full_name, size, len(txt))

        try:
            token = self._backend.register(
                config.service_type,
                config.instance_name,
                config.fqdn,
                config.port,
                bind_ip,
                txt,
            )
        except Exception as exc:
            raise RegistrationError(
                RegistrationErrorKind.BACKEND,
                f"discovery backend failed to register {config.full_name}: {exc}",
                cause=exc,
                service=config.full_name,
                bind_ip=str(bind_ip),
            ) from exc

        handle = RegistrationHandle(
            full_name=config.full_name,
            bind_ip=bind_ip,
            txt_records=txt,
            token=token,
        )
        self._active = handle
        logger.info(
            "Registered %s on %s:%d (host %s)",
            config.full_name,
            bind_ip,
            config.port,
            config.fqdn,
        )
        return handle

    def unregister(self, handle: RegistrationHandle) -> None:
        """Withdraw the advertisement. A released handle is a no-op.

        The handle is released even when the backend fails, so the call is
        attempted exactly once.

        Raises:
            RegistrationError: ``BACKEND`` if the collaborator failed.
        """
        if handle.released:
            return
        handle.released = True
        if self._active is handle:
            self._active = None
        try:
            self._backend.unregister(handle.token)
        except Exception as exc:
            raise RegistrationError(
                RegistrationErrorKind.BACKEND,
                f"discovery backend failed to unregister {handle.full_name}: {exc}",
                cause=exc,
                service=handle.full_name,
            ) from exc
        logger.info("Unregistered %s", handle.full_name)

    def close(self) -> None:
        """Release backend resources (sockets, threads)."""
        self._backend.close()
