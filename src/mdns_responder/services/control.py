"""ControlService: install, uninstall and query the host service.

Delegates to the service-control backend; the registrar is never involved.
Install first seeds the default advertisement config when none exists yet,
and removes that file again if the service manager then refuses.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mdns_responder.config.loader import save_config
from mdns_responder.config.models import default_config
from mdns_responder.errors import ResponderError, ServiceControlError, ServiceControlErrorKind
from mdns_responder.infrastructure.service_control import (
    SERVICE_DESCRIPTION,
    SERVICE_NAME,
    default_service_control,
    service_command,
)
from mdns_responder.services.result import ServiceResult

if TYPE_CHECKING:
    from pathlib import Path

    from mdns_responder.config.settings import ResponderSettings
    from mdns_responder.infrastructure.service_control import ServiceControlBackend

logger = logging.getLogger(__name__)


class ControlService:
    """Service-manager operations for the ``mdns-responder`` service."""

    def __init__(
        self,
        settings: ResponderSettings,
        backend: ServiceControlBackend | None = None,
    ) -> None:
        self._settings = settings
        self._backend = backend

    @property
    def backend(self) -> ServiceControlBackend:
        if self._backend is None:
            self._backend = default_service_control()
        return self._backend

    def install(self) -> ServiceResult:
        """Register this program with the service manager."""
        op = "install"
        config_path = self._settings.config_path
        created = False
        try:
            # Nothing is registered with the service manager unless the config exists.
            if not config_path.exists():
                self._write_default_config(config_path)
                created = True
            unit = self.backend.install(
                service_command(config_path), SERVICE_NAME, SERVICE_DESCRIPTION
            )
        except ResponderError as exc:
            if created:
                config_path.unlink(missing_ok=True)
                logger.info("Removed default config %s", config_path)
            logger.error("Install failed: %s", exc.message)
            return ServiceResult(ok=False, op=op, error=exc.to_service_error())

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "service": SERVICE_NAME,
                "unit": str(unit),
                "config_path": str(config_path),
                "config_created": created,
            },
        )

    @staticmethod
    def _write_default_config(config_path: Path) -> None:
        try:
            save_config(default_config(), config_path)
        except OSError as exc:
            raise ServiceControlError(
                ServiceControlErrorKind.PERMISSION_DENIED
                if isinstance(exc, PermissionError)
                else ServiceControlErrorKind.BACKEND,
                f"cannot write default config to {config_path}",
                cause=exc,
            ) from exc
        logger.info("Wrote default config to %s", config_path)

    def uninstall(self) -> ServiceResult:
        """Remove the service registration. The config file is kept."""
        op = "uninstall"
        try:
            self.backend.uninstall(SERVICE_NAME)
        except ResponderError as exc:
            logger.error("Uninstall failed: %s", exc.message)
            return ServiceResult(ok=False, op=op, error=exc.to_service_error())
        return ServiceResult(
            ok=True,
            op=op,
            data={"service": SERVICE_NAME, "config_kept": str(self._settings.config_path)},
        )

    def status(self) -> ServiceResult:
        """Report the service manager's view of the service."""
        op = "status"
        try:
            state = self.backend.status(SERVICE_NAME)
        except ResponderError as exc:
            return ServiceResult(ok=False, op=op, error=exc.to_service_error())
        return ServiceResult(ok=True, op=op, data={"service": SERVICE_NAME, "state": state})
