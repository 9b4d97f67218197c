"""Network adapter model and bind-address selection.

Selection rules:
- A configured ``bind_address`` always wins; adapters are not enumerated.
- Otherwise the first adapter (in enumeration order) that is up, not
  virtual, and holds a private IPv4 address provides the address.

Selection is deterministic: the same adapter list and config always give
the same answer.
"""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from ipaddress import IPv4Address, IPv4Network
from typing import Protocol

from mdns_responder.errors import AdapterError, AdapterErrorKind

logger = logging.getLogger(__name__)

PRIVATE_NETWORKS: tuple[IPv4Network, ...] = (
    IPv4Network("10.0.0.0/8"),
    IPv4Network("172.16.0.0/12"),
    IPv4Network("192.168.0.0/16"),
)

# Case-insensitive name markers of virtual, tunnel and VPN interfaces.
VIRTUAL_NAME_MARKERS: tuple[str, ...] = (
    "virtual",
    "vpn",
    "hyper-v",
    "vethernet",
    "vmware",
    "vmnet",
    "virtualbox",
    "vboxnet",
    "bluetooth",
    "loopback",
    "docker",
    "veth",
    "virbr",
    "tunnel",
    "tun",
    "tap",
    "wireguard",
    "zerotier",
    "tailscale",
    "utun",
    "teredo",
    "isatap",
)


def is_private_ipv4(address: IPv4Address) -> bool:
    """True for RFC 1918 addresses only (not loopback or link-local)."""
    return any(address in network for network in PRIVATE_NETWORKS)


def has_virtual_name(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in VIRTUAL_NAME_MARKERS)


@dataclass(frozen=True)
class NetworkAdapter:
    """Snapshot of one host network interface.

    Attributes:
        name: Interface name or description as reported by the OS.
        ipv4_addresses: Assigned IPv4 addresses, in OS order.
        is_up: Whether the interface is administratively/operationally up.
        virtual_hint: OS-provided virtual classification, when available.
    """

    name: str
    ipv4_addresses: tuple[IPv4Address, ...] = ()
    is_up: bool = True
    virtual_hint: bool = False

    @property
    def private_addresses(self) -> tuple[IPv4Address, ...]:
        return tuple(a for a in self.ipv4_addresses if is_private_ipv4(a))

    @property
    def is_virtual(self) -> bool:
        """Virtual, tunnel or VPN adapter, or one with no private IPv4."""
        return self.virtual_hint or has_virtual_name(self.name) or not self.private_addresses


class BindAddressSource(Protocol):
    """Anything carrying an optional manual bind address (e.g. ServiceConfig)."""

    @property
    def bind_address(self) -> str | None: ...


def _parse_override(value: str) -> IPv4Address:
    try:
        return IPv4Address(value)
    except ipaddress.AddressValueError as exc:
        raise AdapterError(
            AdapterErrorKind.INVALID_OVERRIDE,
            f"bind_address '{value}' is not a valid IPv4 address",
            bind_address=value,
        ) from exc


def pick_adapter_address(adapters: Iterable[NetworkAdapter]) -> tuple[NetworkAdapter, IPv4Address]:
    """Return the first usable adapter and its first private address.

    Raises:
        AdapterError: ``NO_SUITABLE_ADAPTER`` when nothing qualifies.
    """
    skipped: list[str] = []
    for adapter in adapters:
        if not adapter.is_up:
            skipped.append(f"{adapter.name} (down)")
            continue
        if adapter.is_virtual:
            skipped.append(f"{adapter.name} (virtual)")
            continue
        return adapter, adapter.private_addresses[0]

    raise AdapterError(
        AdapterErrorKind.NO_SUITABLE_ADAPTER,
        "no up, non-virtual adapter with a private IPv4 address"
        + (f"; skipped: {', '.join(skipped)}" if skipped else "; no adapters found"),
        skipped=skipped or None,
    )


def select_bind_address(
    config: BindAddressSource,
    adapters: Iterable[NetworkAdapter],
) -> IPv4Address:
    """Choose the IPv4 address to advertise.

    Raises:
        AdapterError: ``INVALID_OVERRIDE`` or ``NO_SUITABLE_ADAPTER``.
    """
    if config.bind_address is not None:
        return _parse_override(config.bind_address)
    _adapter, address = pick_adapter_address(adapters)
    return address


class AdapterSelector:
    """Bind-address selection over a lazily enumerated adapter snapshot.

    Parameters:
        enumerate_adapters: Callable returning the current adapter list
            (see :func:`mdns_responder.infrastructure.network.enumerate_adapters`).
            Only called when the config has no ``bind_address``.
    """

    def __init__(self, enumerate_adapters: Callable[[], Sequence[NetworkAdapter]]) -> None:
        self._enumerate = enumerate_adapters

    def select(self, config: BindAddressSource) -> IPv4Address:
        if config.bind_address is not None:
            address = _parse_override(config.bind_address)
            logger.info("Using manually configured bind address %s", address)
            return address

        try:
            adapters = self._enumerate()
        except Exception as exc:
            raise AdapterError(
                AdapterErrorKind.ENUMERATION_FAILED,
                f"cannot enumerate network adapters: {exc}",
                cause=f"{type(exc).__name__}: {exc}",
            ) from exc
        adapter, address = pick_adapter_address(adapters)
        logger.info("Selected %s from adapter '%s'", address, adapter.name)
        return address

    def is_still_assigned(self, address: IPv4Address) -> bool:
        """Whether *address* is still held by an adapter that is up."""
        return any(
            adapter.is_up and address in adapter.ipv4_addresses for adapter in self._enumerate()
        )
