"""ShutdownCoordinator: the one-shot termination signal.

State machine (one-way, no cycles)::

    RUNNING -> SHUTDOWN_REQUESTED -> STOPPED

Any execution context (signal handler, service-manager stop event, fatal
fault path) may call :meth:`request_shutdown`; only the main run loop waits
on it and performs cleanup.

The lock is reentrant: a signal handler runs on the main thread and may call
:meth:`request_shutdown` while that thread is already inside another
coordinator method.
"""

from __future__ import annotations

import logging
import threading
from enum import StrEnum

logger = logging.getLogger(__name__)


class ShutdownState(StrEnum):
    RUNNING = "running"
    SHUTDOWN_REQUESTED = "shutdown_requested"
    STOPPED = "stopped"


class ShutdownCoordinator:
    """Monotonic shutdown flag with blocking, bounded waits."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._requested = threading.Event()
        self._stopped = threading.Event()
        self._state = ShutdownState.RUNNING
        self._reason: str | None = None

    @property
    def state(self) -> ShutdownState:
        with self._lock:
            return self._state

    @property
    def reason(self) -> str | None:
        """Reason given by the first :meth:`request_shutdown` call."""
        with self._lock:
            return self._reason

    @property
    def is_shutdown_requested(self) -> bool:
        return self._requested.is_set()

    def request_shutdown(self, reason: str = "requested") -> bool:
        """Transition RUNNING -> SHUTDOWN_REQUESTED.

        Returns True only for the call that performed the transition; every
        later call is a no-op returning False.  The event is set while the
        lock is held, so a waiter arriving after this returns never misses it.
        """
        with self._lock:
            if self._state is not ShutdownState.RUNNING:
                return False
            self._state = ShutdownState.SHUTDOWN_REQUESTED
            self._reason = reason
            self._requested.set()
        logger.info("Shutdown requested: %s", reason)
        return True

    def wait_for_shutdown(self, timeout: float | None = None) -> bool:
        """Block until shutdown is requested or *timeout* seconds elapse.

        Returns True if shutdown was requested, False on timeout.
        """
        return self._requested.wait(timeout)

    def mark_stopped(self) -> None:
        """Record that cleanup finished (SHUTDOWN_REQUESTED -> STOPPED).

        Implies a shutdown request if none happened.  Idempotent.
        """
        with self._lock:
            if self._state is ShutdownState.STOPPED:
                return
            if self._state is ShutdownState.RUNNING:
                self._reason = self._reason or "stopped"
                self._requested.set()
            self._state = ShutdownState.STOPPED
            self._stopped.set()
        logger.debug("Shutdown complete")

    def wait_stopped(self, timeout: float | None = None) -> bool:
        """Block until :meth:`mark_stopped` or *timeout*; True if stopped."""
        return self._stopped.wait(timeout)
