"""Tests for ShutdownCoordinator."""

from __future__ import annotations

import threading

from mdns_responder.services.shutdown import ShutdownCoordinator, ShutdownState


class TestRequestShutdown:
    def test_initial_state(self) -> None:
        coordinator = ShutdownCoordinator()
        assert coordinator.state is ShutdownState.RUNNING
        assert not coordinator.is_shutdown_requested
        assert coordinator.reason is None

    def test_first_request_transitions(self) -> None:
        coordinator = ShutdownCoordinator()
        assert coordinator.request_shutdown("signal SIGTERM") is True
        assert coordinator.state is ShutdownState.SHUTDOWN_REQUESTED
        assert coordinator.reason == "signal SIGTERM"

    def test_later_requests_are_noops(self) -> None:
        coordinator = ShutdownCoordinator()
        coordinator.request_shutdown("first")
        assert coordinator.request_shutdown("second") is False
        assert coordinator.reason == "first"

    def test_request_reenters_from_same_thread(self) -> None:
        coordinator = ShutdownCoordinator()
        with coordinator._lock:
            assert coordinator.request_shutdown("signal SIGINT") is True
            coordinator.mark_stopped()
        assert coordinator.state is ShutdownState.STOPPED

    def test_concurrent_requests_transition_once(self) -> None:
        coordinator = ShutdownCoordinator()
        barrier = threading.Barrier(16)
        results: list[bool] = []
        lock = threading.Lock()

        def request(i: int) -> None:
            barrier.wait()
            outcome = coordinator.request_shutdown(f"thread {i}")
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=request, args=(i,)) for i in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)
        assert results.count(True) == 1
        assert len(results) == 16


class TestWaiting:
    def test_wait_times_out(self) -> None:
        assert ShutdownCoordinator().wait_for_shutdown(0.01) is False

    def test_wait_after_request_returns_immediately(self) -> None:
        coordinator = ShutdownCoordinator()
        coordinator.request_shutdown()
        assert coordinator.wait_for_shutdown(0) is True

    def test_all_waiters_unblock(self) -> None:
        coordinator = ShutdownCoordinator()
        woke: list[bool] = []
        lock = threading.Lock()

        def waiter() -> None:
            outcome = coordinator.wait_for_shutdown(5)
            with lock:
                woke.append(outcome)

        threads = [threading.Thread(target=waiter) for _ in range(8)]
        for t in threads:
            t.start()
        coordinator.request_shutdown()
        for t in threads:
            t.join(5)
        assert woke == [True] * 8


class TestMarkStopped:
    def test_after_request(self) -> None:
        coordinator = ShutdownCoordinator()
        coordinator.request_shutdown("x")
        coordinator.mark_stopped()
        assert coordinator.state is ShutdownState.STOPPED
        assert coordinator.wait_stopped(0) is True
        assert coordinator.reason == "x"

    def test_implies_request(self) -> None:
        coordinator = ShutdownCoordinator()
        coordinator.mark_stopped()
        assert coordinator.is_shutdown_requested
        assert coordinator.request_shutdown() is False
        assert coordinator.reason == "stopped"

    def test_idempotent(self) -> None:
        coordinator = ShutdownCoordinator()
        coordinator.mark_stopped()
        coordinator.mark_stopped()
        assert coordinator.state is ShutdownState.STOPPED

    def test_wait_stopped_times_out(self) -> None:
        coordinator = ShutdownCoordinator()
        coordinator.request_shutdown()
        assert coordinator.wait_stopped(0.01) is False
