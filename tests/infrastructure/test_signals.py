"""Tests for termination signal routing."""

from __future__ import annotations

import os
import signal
import sys
import threading
import time

import pytest

from mdns_responder.infrastructure.signals import install_signal_handlers, termination_signals
from mdns_responder.services.shutdown import ShutdownCoordinator


class TestTerminationSignals:
    def test_includes_int_and_term(self) -> None:
        sigs = termination_signals()
        assert signal.SIGINT in sigs
        assert signal.SIGTERM in sigs


class TestInstallSignalHandlers:
    @pytest.mark.skipif(sys.platform == "win32", reason="os.kill delivers SIGTERM only on POSIX")
    def test_routes_sigterm(self) -> None:
        received: list[str] = []
        previous = signal.getsignal(signal.SIGTERM)
        restore = install_signal_handlers(received.append)
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            deadline = time.monotonic() + 2
            while not received and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            restore()
        assert received == ["SIGTERM"]
        assert signal.getsignal(signal.SIGTERM) == previous

    @pytest.mark.skipif(sys.platform == "win32", reason="os.kill delivers SIGTERM only on POSIX")
    def test_signal_while_main_thread_holds_coordinator(self) -> None:
        coordinator = ShutdownCoordinator()
        restore = install_signal_handlers(
            lambda name: coordinator.request_shutdown(f"signal {name}")
        )
        try:
            with coordinator._lock:
                os.kill(os.getpid(), signal.SIGTERM)
                deadline = time.monotonic() + 2
                while not coordinator.is_shutdown_requested and time.monotonic() < deadline:
                    time.sleep(0.01)
        finally:
            restore()
        assert coordinator.reason == "signal SIGTERM"

    def test_noop_off_main_thread(self) -> None:
        previous = signal.getsignal(signal.SIGTERM)
        restores: list[object] = []

        def install() -> None:
            restores.append(install_signal_handlers(lambda _name: None))

        thread = threading.Thread(target=install)
        thread.start()
        thread.join(5)
        assert signal.getsignal(signal.SIGTERM) == previous
        restore = restores[0]
        assert callable(restore)
        restore()
