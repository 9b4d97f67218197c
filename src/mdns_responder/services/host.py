"""ServiceHost: the lifecycle orchestrator.

Host lifecycle::

    STOPPED -> STARTING -> RUNNING -> STOP_PENDING -> STOPPED
    STARTING -> STOPPED                      (startup failure)

Pipeline: LOAD CONFIG -> SELECT ADDRESS -> REGISTER -> WAIT -> UNREGISTER

INVARIANT: only the thread running the lifecycle touches the registration
handle.  Signal handlers and service-manager STOP events only call
:meth:`ShutdownCoordinator.request_shutdown` (or :meth:`report_fault`).
"""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable
from enum import StrEnum
from ipaddress import IPv4Address
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog

from mdns_responder.config.loader import load_config
from mdns_responder.errors import RegistrationError, RegistrationErrorKind, ResponderError
from mdns_responder.services.result import ServiceError, ServiceResult
from mdns_responder.services.shutdown import ShutdownCoordinator, ShutdownState

if TYPE_CHECKING:
    from mdns_responder.config.models import ServiceConfig
    from mdns_responder.config.settings import ResponderSettings
    from mdns_responder.domain.adapters import AdapterSelector
    from mdns_responder.infrastructure.notify import SystemdNotifier
    from mdns_responder.services.registrar import RegistrationHandle, ServiceRegistrar

log = structlog.get_logger(__name__)

# Upper bound on how long a reported fault waits before the run loop sees it.
FAULT_POLL_INTERVAL = 1.0
# One re-registration plus a single retry.
REREGISTER_ATTEMPTS = 2


class HostState(StrEnum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOP_PENDING = "stop_pending"


HOST_TRANSITIONS: dict[str, list[str]] = {
    "stopped": ["starting"],
    "starting": ["running", "stopped"],
    "running": ["stop_pending"],
    "stop_pending": ["stopped"],
}


class ControlEvent(StrEnum):
    """Events delivered by the host service manager in service mode."""

    START = "start"
    STOP = "stop"


class StatusReporter(Protocol):
    """Receives every host state transition (service-manager status)."""

    def report(self, state: HostState, detail: str) -> None: ...


class SystemdStatusReporter:
    """Translate host states into sd_notify messages."""

    def __init__(self, notifier: SystemdNotifier) -> None:
        self._notifier = notifier

    def report(self, state: HostState, detail: str) -> None:
        if state is HostState.RUNNING:
            self._notifier.notify("READY=1", f"STATUS={detail}")
        elif state is HostState.STOP_PENDING:
            self._notifier.notify("STOPPING=1", f"STATUS={detail}")
        else:
            self._notifier.notify(f"STATUS={detail}")


class ServiceHost:
    """Owns config, address selection, registration and shutdown.

    Parameters:
        settings: Runtime settings (config path, grace timeout, watchdog).
        registrar: Registration owner wrapping the discovery backend.
        selector: Bind-address selector over the adapter enumerator.
        coordinator: Shared shutdown signal (created if omitted).
        reporter: Optional service-manager status sink.
        config_loader: Loads the advertisement config from a path.
    """

    def __init__(
        self,
        settings: ResponderSettings,
        registrar: ServiceRegistrar,
        selector: AdapterSelector,
        *,
        coordinator: ShutdownCoordinator | None = None,
        reporter: StatusReporter | None = None,
        config_loader: Callable[[Path], ServiceConfig] = load_config,
    ) -> None:
        self._settings = settings
        self._registrar = registrar
        self._selector = selector
        self._coordinator = coordinator or ShutdownCoordinator()
        self._reporter = reporter
        self._load_config = config_loader

        self._state_lock = threading.Lock()
        self._state = HostState.STOPPED
        self._faults: queue.SimpleQueue[BaseException] = queue.SimpleQueue()

        # Owned by the lifecycle thread only.
        self._config: ServiceConfig | None = None
        self._bind_ip: IPv4Address | None = None
        self._auto_selected = False
        self._handle: RegistrationHandle | None = None
        self._fatal: ResponderError | None = None
        self._next_watch = 0.0

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> HostState:
        with self._state_lock:
            return self._state

    @property
    def coordinator(self) -> ShutdownCoordinator:
        return self._coordinator

    @property
    def config(self) -> ServiceConfig | None:
        return self._config

    @property
    def bind_ip(self) -> IPv4Address | None:
        return self._bind_ip

    # ------------------------------------------------------------------
    # Lifecycle phases
    # ------------------------------------------------------------------

    def start(self) -> None:
        """STARTING: load config, select the address, register.

        Raises:
            ResponderError: Any config, adapter or registration failure.
                The host is back in STOPPED when this, or any unexpected
                exception, propagates.
        """
        self._transition(HostState.STARTING, "Starting")
        try:
            config = self._load_config(self._settings.config_path)
            self._config = config
            bind_ip = self._selector.select(config)
            self._handle = self._registrar.register(config, bind_ip)
        except Exception:
            try:
                self._registrar.close()
            finally:
                self._transition(HostState.STOPPED, "Startup failed")
                self._coordinator.mark_stopped()
            raise

        self._bind_ip = bind_ip
        self._auto_selected = config.bind_address is None
        self._next_watch = time.monotonic() + self._settings.watch_interval
        self._transition(HostState.RUNNING, f"Advertising {config.full_name} on {bind_ip}")

    def serve(self) -> None:
        """RUNNING: block until shutdown is requested, handling faults."""
        watch = self._settings.watch_interval
        tick = min(FAULT_POLL_INTERVAL, watch) if watch > 0 else FAULT_POLL_INTERVAL
        while not self._coordinator.wait_for_shutdown(tick):
            self._check_health()
        log.info("host.shutdown", reason=self._coordinator.reason)

    def stop(self) -> list[str]:
        """STOP_PENDING: unregister within the grace timeout, then STOPPED.

        Unregistration is best-effort: failures and timeouts become warnings
        and never prevent reaching STOPPED.  Returns the warnings.
        """
        self._transition(HostState.STOP_PENDING, "Unregistering")
        handle, self._handle = self._handle, None
        errors: list[BaseException] = []

        def cleanup() -> None:
            try:
                if handle is not None:
                    self._registrar.unregister(handle)
            except RegistrationError as exc:
                errors.append(exc)
            finally:
                try:
                    self._registrar.close()
                except Exception as exc:
                    errors.append(exc)

        grace = self._settings.grace_timeout
        worker = threading.Thread(target=cleanup, name="mdns-unregister", daemon=True)
        worker.start()
        worker.join(grace)

        warnings: list[str] = []
        if worker.is_alive():
            warnings.append(f"unregister did not finish within {grace:g}s; exiting anyway")
        warnings.extend(f"unregister failed: {exc}" for exc in errors)
        for warning in warnings:
            log.warning("host.stop_warning", warning=warning)

        self._transition(HostState.STOPPED, "Stopped")
        self._coordinator.mark_stopped()
        return warnings

    def run(self) -> ServiceResult:
        """Full lifecycle: start, serve until shutdown, stop."""
        op = "run"
        try:
            self.start()
        except ResponderError as exc:
            log.error("host.startup_failed", code=exc.code, error=exc.message, **exc.detail)
            return ServiceResult(ok=False, op=op, error=exc.to_service_error())

        config = self._config
        assert config is not None
        try:
            self.serve()
        finally:
            warnings = self.stop()

        if self._fatal is not None:
            exc = self._fatal
            log.error("host.fatal", code=exc.code, error=exc.message, **exc.detail)
            return ServiceResult(
                ok=False, op=op, error=exc.to_service_error(), warnings=warnings
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "service": config.full_name,
                "hostname": config.fqdn,
                "port": config.port,
                "bind_address": str(self._bind_ip),
                "reason": self._coordinator.reason,
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Service-mode control
    # ------------------------------------------------------------------

    def handle_control(
        self,
        event: ControlEvent,
        *,
        wait_timeout: float | None = None,
    ) -> ServiceResult:
        """Feed a service-manager event into the host state machine.

        ``START`` runs the whole lifecycle in the calling context and returns
        its result.  ``STOP`` requests shutdown; with *wait_timeout* it also
        waits for cleanup so the caller can acknowledge the stop.
        """
        if event is ControlEvent.START:
            if (
                self.state is not HostState.STOPPED
                or self._coordinator.state is not ShutdownState.RUNNING
            ):
                return ServiceResult(
                    ok=False,
                    op="start",
                    error=ServiceError(
                        code="HOST_INVALID_STATE",
                        message=f"cannot start: host is {self.state}, "
                        f"shutdown is {self._coordinator.state}",
                    ),
                )
            return self.run()

        self._coordinator.request_shutdown("service stop")
        if wait_timeout is None:
            return ServiceResult(ok=True, op="stop", data={"acknowledged": False})
        stopped = self._coordinator.wait_stopped(wait_timeout)
        warnings = [] if stopped else [f"host did not stop within {wait_timeout:g}s"]
        return ServiceResult(
            ok=True, op="stop", data={"acknowledged": stopped}, warnings=warnings
        )

    def report_fault(self, fault: BaseException) -> None:
        """Report an asynchronous registration fault (any thread)."""
        self._faults.put(fault)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _transition(self, target: HostState, detail: str) -> None:
        with self._state_lock:
            current = self._state
            if target.value not in HOST_TRANSITIONS.get(current.value, []):
                msg = f"invalid host transition {current} -> {target}"
                raise RuntimeError(msg)
            self._state = target
        log.debug("host.state", previous=str(current), state=str(target), detail=detail)
        if self._reporter is not None:
            try:
                self._reporter.report(target, detail)
            except Exception:
                log.warning("host.status_report_failed", state=str(target), exc_info=True)

    def _drain_faults(self) -> list[BaseException]:
        faults: list[BaseException] = []
        while True:
            try:
                faults.append(self._faults.get_nowait())
            except queue.Empty:
                return faults

    def _check_health(self) -> None:
        faults = self._drain_faults()
        if not faults and self._watch_due():
            assert self._bind_ip is not None
            try:
                assigned = self._selector.is_still_assigned(self._bind_ip)
            except Exception:
                log.warning("host.watchdog_failed", exc_info=True)
                assigned = True
            if not assigned:
                faults.append(
                    RegistrationError(
                        RegistrationErrorKind.BACKEND,
                        f"address {self._bind_ip} is no longer assigned to an up adapter",
                        bind_ip=str(self._bind_ip),
                    )
                )
        if faults:
            self._recover(faults[-1])

    def _watch_due(self) -> bool:
        if not self._auto_selected or self._settings.watch_interval <= 0:
            return False
        now = time.monotonic()
        if now < self._next_watch:
            return False
        self._next_watch = now + self._settings.watch_interval
        return True

    def _recover(self, fault: BaseException) -> None:
        log.warning("host.registration_fault", error=str(fault))
        last_error: ResponderError | None = None
        for attempt in range(1, REREGISTER_ATTEMPTS + 1):
            if self._coordinator.is_shutdown_requested:
                return
            try:
                self._reregister()
            except ResponderError as exc:
                last_error = exc
                log.warning("host.reregister_failed", attempt=attempt, error=exc.message)
            else:
                log.info("host.reregistered", attempt=attempt, bind_ip=str(self._bind_ip))
                return

        assert last_error is not None
        self._fatal = RegistrationError(
            RegistrationErrorKind.BACKEND,
            f"re-registration failed after {REREGISTER_ATTEMPTS} attempts: {last_error.message}",
            cause=last_error,
        )
        self._coordinator.request_shutdown("re-registration failed")

    def _reregister(self) -> None:
        config = self._config
        assert config is not None
        if self._handle is not None:
            handle, self._handle = self._handle, None
            try:
                self._registrar.unregister(handle)
            except RegistrationError as exc:
                log.warning("host.unregister_failed", error=exc.message)
        bind_ip = self._selector.select(config)
        self._handle = self._registrar.register(config, bind_ip)
        self._bind_ip = bind_ip


def build_host(
    settings: ResponderSettings,
    *,
    reporter: StatusReporter | None = None,
    coordinator: ShutdownCoordinator | None = None,
) -> ServiceHost:
    """Wire a ServiceHost to the real zeroconf and psutil backends."""
    from mdns_responder.domain.adapters import AdapterSelector
    from mdns_responder.infrastructure.network import enumerate_adapters
    from mdns_responder.infrastructure.zeroconf_backend import ZeroconfBackend
    from mdns_responder.services.registrar import ServiceRegistrar

    return ServiceHost(
        settings,
        ServiceRegistrar(ZeroconfBackend()),
        AdapterSelector(enumerate_adapters),
        coordinator=coordinator,
        reporter=reporter,
    )
