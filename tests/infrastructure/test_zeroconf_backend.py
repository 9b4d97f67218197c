"""Tests for the zeroconf registration backend (no network traffic)."""

from __future__ import annotations

from ipaddress import IPv4Address
from typing import Any

import pytest
from zeroconf import ServiceInfo

from mdns_responder.infrastructure import zeroconf_backend
from mdns_responder.infrastructure.zeroconf_backend import ZeroconfBackend


class FakeZeroconf:
    instances: list[FakeZeroconf] = []
    fail_register = False

    def __init__(self, interfaces: Any = None) -> None:
        self.interfaces = interfaces
        self.registered: list[ServiceInfo] = []
        self.unregistered: list[ServiceInfo] = []
        self.closed = False
        FakeZeroconf.instances.append(self)

    def register_service(self, info: ServiceInfo) -> None:
        if FakeZeroconf.fail_register:
            raise OSError("name conflict")
        self.registered.append(info)

    def unregister_service(self, info: ServiceInfo) -> None:
        self.unregistered.append(info)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def fake_zeroconf(monkeypatch: pytest.MonkeyPatch) -> type[FakeZeroconf]:
    FakeZeroconf.instances = []
    FakeZeroconf.fail_register = False
    monkeypatch.setattr(zeroconf_backend, "Zeroconf", FakeZeroconf)
    return FakeZeroconf


def _register(backend: ZeroconfBackend) -> Any:
    return backend.register(
        "_smb._tcp.local.",
        "Office-PC",
        "office-pc.local.",
        445,
        IPv4Address("192.168.1.50"),
        {"workgroup": "WORKGROUP"},
    )


class TestRegister:
    def test_binds_to_selected_interface(self) -> None:
        token = _register(ZeroconfBackend())
        zc = FakeZeroconf.instances[0]
        assert zc.interfaces == ["192.168.1.50"]
        info = zc.registered[0]
        assert info is token.info
        assert info.name == "Office-PC._smb._tcp.local."
        assert info.server == "office-pc.local."
        assert info.port == 445
        assert info.parsed_addresses() == ["192.168.1.50"]
        assert info.properties == {b"workgroup": b"WORKGROUP"}

    def test_failure_closes_instance(self) -> None:
        FakeZeroconf.fail_register = True
        with pytest.raises(OSError):
            _register(ZeroconfBackend())
        assert FakeZeroconf.instances[0].closed


class TestUnregister:
    def test_unregisters_and_closes(self) -> None:
        backend = ZeroconfBackend()
        token = _register(backend)
        backend.unregister(token)
        zc = FakeZeroconf.instances[0]
        assert zc.unregistered == [token.info]
        assert zc.closed

    def test_close_releases_leftovers(self) -> None:
        backend = ZeroconfBackend()
        _register(backend)
        backend.close()
        assert FakeZeroconf.instances[0].closed
