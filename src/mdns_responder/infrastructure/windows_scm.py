"""Windows service-mode entry built on pywin32.

The SCM starts ``python -m mdns_responder --config <path> service``; on
Windows that command calls :func:`run_service`, which hands the process to
the service control dispatcher.  SCM stop requests become
``ControlEvent.STOP`` and host transitions are reported back as SCM states.
Only importable on Windows.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

import pywintypes
import servicemanager
import win32service
import win32serviceutil

from mdns_responder.errors import ServiceControlError, ServiceControlErrorKind
from mdns_responder.infrastructure.service_control import (
    SERVICE_DESCRIPTION,
    SERVICE_DISPLAY_NAME,
    SERVICE_NAME,
)
from mdns_responder.services.host import ControlEvent, HostState, build_host

if TYPE_CHECKING:
    from mdns_responder.config.settings import ResponderSettings
    from mdns_responder.services.result import ServiceResult

logger = logging.getLogger(__name__)

# STOPPED is reported by the dispatcher once SvcRun returns.
SCM_STATES = {
    HostState.STARTING: win32service.SERVICE_START_PENDING,
    HostState.RUNNING: win32service.SERVICE_RUNNING,
    HostState.STOP_PENDING: win32service.SERVICE_STOP_PENDING,
}


class ScmStatusReporter:
    """Forward host transitions to the SCM through a ServiceFramework."""

    def __init__(self, service: Any) -> None:
        self._service = service

    def report(self, state: HostState, detail: str) -> None:
        scm_state = SCM_STATES.get(state)
        if scm_state is not None:
            self._service.ReportServiceStatus(scm_state)


class ResponderWindowsService(win32serviceutil.ServiceFramework):
    _svc_name_ = SERVICE_NAME
    _svc_display_name_ = SERVICE_DISPLAY_NAME
    _svc_description_ = SERVICE_DESCRIPTION

    # Set by run_service before the dispatcher instantiates the class.
    settings: ClassVar[ResponderSettings | None] = None
    result: ClassVar[ServiceResult | None] = None

    def __init__(self, args: Any) -> None:
        super().__init__(args)
        if self.settings is None:
            msg = "ResponderWindowsService.settings must be set before dispatch"
            raise RuntimeError(msg)
        self._host = build_host(self.settings, reporter=ScmStatusReporter(self))

    def SvcStop(self) -> None:  # noqa: N802
        self._host.handle_control(ControlEvent.STOP)

    def SvcRun(self) -> None:  # noqa: N802
        result = self._host.handle_control(ControlEvent.START)
        type(self).result = result
        if not result.ok and result.error is not None:
            servicemanager.LogErrorMsg(f"{result.error.code}: {result.error.message}")


def run_service(settings: ResponderSettings) -> ServiceResult:
    """Connect to the SCM dispatcher and run until the service stops.

    Raises:
        ServiceControlError: ``BACKEND`` when the process was not started by
            the SCM (for example when run from a console).
    """
    ResponderWindowsService.settings = settings
    ResponderWindowsService.result = None
    servicemanager.Initialize()
    servicemanager.PrepareToHostSingle(ResponderWindowsService)
    try:
        servicemanager.StartServiceCtrlDispatcher()
    except pywintypes.error as exc:
        raise ServiceControlError(
            ServiceControlErrorKind.BACKEND,
            "not started by the Windows service control manager",
            cause=exc,
        ) from exc

    result = ResponderWindowsService.result
    if result is None:
        raise ServiceControlError(
            ServiceControlErrorKind.BACKEND, "service dispatcher returned without running"
        )
    logger.debug("Service dispatcher returned: ok=%s", result.ok)
    return result
