"""Host service-control backends: systemd on Linux, the SCM on Windows.

Every systemctl and sc.exe call goes through an injectable runner so tests
never touch the real service manager.  Failures are mapped onto
:class:`~mdns_responder.errors.ServiceControlError` kinds.
"""

from __future__ import annotations

import logging
import os
import re
import shlex
import subprocess
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

from mdns_responder.errors import ServiceControlError, ServiceControlErrorKind

logger = logging.getLogger(__name__)

SERVICE_NAME = "mdns-responder"
SERVICE_DISPLAY_NAME = "mDNS Responder"
SERVICE_DESCRIPTION = "mDNS Responder - Bonjour advertisement for SMB shares"

Runner = Callable[[Sequence[str]], "subprocess.CompletedProcess[str]"]

_UNIT_TEMPLATE = """\
[Unit]
Description={description}
Wants=network-online.target
After=network-online.target

[Service]
Type=notify
NotifyAccess=main
ExecStart={exec_start}
Restart=on-failure
RestartSec=5
# Exit codes 3 (config) and 4 (adapter) need an operator, not a restart loop.
RestartPreventExitStatus=3 4

[Install]
WantedBy=multi-user.target
"""

# sc.exe exits with the Win32 error code of the call that failed.
ERROR_ACCESS_DENIED = 5
ERROR_SERVICE_DOES_NOT_EXIST = 1060
ERROR_SERVICE_EXISTS = 1073

_SC_ERROR_KINDS = {
    ERROR_ACCESS_DENIED: ServiceControlErrorKind.PERMISSION_DENIED,
    ERROR_SERVICE_DOES_NOT_EXIST: ServiceControlErrorKind.NOT_INSTALLED,
    ERROR_SERVICE_EXISTS: ServiceControlErrorKind.ALREADY_INSTALLED,
}
_SC_STATE_RE = re.compile(r"^\s*STATE\s*:\s*\d+\s+(\w+)", re.MULTILINE)


def _run(args: Sequence[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(list(args), capture_output=True, text=True, check=False)


class ServiceControlBackend(Protocol):
    """Contract for registering this program with the host service manager.

    ``install`` returns where the registration lives: the unit file under
    systemd, the service name under the SCM.
    """

    def install(
        self, command: Sequence[str], service_name: str, description: str
    ) -> Path | str: ...

    def uninstall(self, service_name: str) -> None: ...

    def status(self, service_name: str) -> str: ...


class _CommandLineBackend:
    """Shared runner plumbing for backends driven by a CLI tool."""

    def __init__(self, runner: Runner) -> None:
        self._runner = runner

    def _invoke(self, args: Sequence[str]) -> subprocess.CompletedProcess[str]:
        try:
            return self._runner(args)
        except OSError as exc:
            raise ServiceControlError(
                ServiceControlErrorKind.BACKEND,
                f"cannot run {args[0]}",
                cause=exc,
                command=" ".join(args),
            ) from exc


class SystemdServiceControl(_CommandLineBackend):
    """Manage a ``<name>.service`` unit in *unit_dir* via systemctl.

    Parameters:
        unit_dir: Directory for unit files.
        runner: Executes a command and returns the completed process.
        require_root: Refuse install/uninstall unless running as root.
    """

    def __init__(
        self,
        unit_dir: Path = Path("/etc/systemd/system"),
        *,
        runner: Runner = _run,
        require_root: bool = True,
    ) -> None:
        super().__init__(runner)
        self._unit_dir = unit_dir
        self._require_root = require_root

    def unit_path(self, service_name: str) -> Path:
        return self._unit_dir / f"{service_name}.service"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def install(self, command: Sequence[str], service_name: str, description: str) -> Path:
        """Write and enable the unit. Returns the unit file path."""
        self._check_privilege("install")
        path = self.unit_path(service_name)
        if path.exists():
            raise ServiceControlError(
                ServiceControlErrorKind.ALREADY_INSTALLED,
                f"service '{service_name}' is already installed ({path})",
                service=service_name,
            )

        unit = _UNIT_TEMPLATE.format(
            description=description,
            exec_start=" ".join(shlex.quote(part) for part in command),
        )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(unit, encoding="utf-8")
        except PermissionError as exc:
            raise ServiceControlError(
                ServiceControlErrorKind.PERMISSION_DENIED,
                f"cannot write unit file {path}",
                cause=exc,
            ) from exc
        except OSError as exc:
            raise ServiceControlError(
                ServiceControlErrorKind.BACKEND, f"cannot write unit file {path}", cause=exc
            ) from exc
        logger.info("Wrote unit file %s", path)

        self._systemctl("daemon-reload")
        self._systemctl("enable", f"{service_name}.service")
        return path

    def uninstall(self, service_name: str) -> None:
        """Stop, disable and remove the unit."""
        self._check_privilege("uninstall")
        path = self.unit_path(service_name)
        if not path.exists():
            raise ServiceControlError(
                ServiceControlErrorKind.NOT_INSTALLED,
                f"service '{service_name}' is not installed",
                service=service_name,
            )

        try:
            self._systemctl("disable", "--now", f"{service_name}.service")
        except ServiceControlError as exc:
            # A stopped or broken unit must not block removal.
            logger.warning("Could not stop %s: %s", service_name, exc.message)

        try:
            path.unlink()
        except PermissionError as exc:
            raise ServiceControlError(
                ServiceControlErrorKind.PERMISSION_DENIED,
                f"cannot remove unit file {path}",
                cause=exc,
            ) from exc
        logger.info("Removed unit file %s", path)
        self._systemctl("daemon-reload")

    def status(self, service_name: str) -> str:
        """Return the systemd active state (``active``, ``inactive``, ...)."""
        if not self.unit_path(service_name).exists():
            raise ServiceControlError(
                ServiceControlErrorKind.NOT_INSTALLED,
                f"service '{service_name}' is not installed",
                service=service_name,
            )
        # is-active exits non-zero for anything but "active"; stdout still
        # carries the state.
        proc = self._invoke(["systemctl", "is-active", f"{service_name}.service"])
        return proc.stdout.strip() or "unknown"

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_privilege(self, action: str) -> None:
        if not self._require_root:
            return
        geteuid = getattr(os, "geteuid", None)
        if geteuid is not None and geteuid() != 0:
            raise ServiceControlError(
                ServiceControlErrorKind.PERMISSION_DENIED,
                f"{action} requires root privileges (try sudo)",
            )

    def _systemctl(self, *args: str) -> None:
        command = ["systemctl", *args]
        proc = self._invoke(command)
        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            kind = (
                ServiceControlErrorKind.PERMISSION_DENIED
                if "access denied" in stderr.lower() or "permission" in stderr.lower()
                else ServiceControlErrorKind.BACKEND
            )
            raise ServiceControlError(
                kind,
                f"'{' '.join(command)}' failed (exit {proc.returncode}): {stderr or 'no output'}",
                command=" ".join(command),
            )
        logger.debug("%s ok", " ".join(command))


class WindowsServiceControl(_CommandLineBackend):
    """Manage an auto-start Windows service through ``sc.exe``.

    Privilege checks are left to the SCM: ``sc.exe`` exits with
    ``ERROR_ACCESS_DENIED`` when not run from an elevated prompt.
    """

    def __init__(self, *, runner: Runner = _run, sc_exe: str = "sc.exe") -> None:
        super().__init__(runner)
        self._sc_exe = sc_exe

    def install(self, command: Sequence[str], service_name: str, description: str) -> str:
        """Create the service and set its description. Returns the service name."""
        self._sc(
            "create",
            service_name,
            "binPath=",
            subprocess.list2cmdline(list(command)),
            "start=",
            "auto",
            "type=",
            "own",
            "DisplayName=",
            SERVICE_DISPLAY_NAME,
        )
        logger.info("Created Windows service %s", service_name)
        try:
            self._sc("description", service_name, description)
        except ServiceControlError as exc:
            logger.warning("Could not set description of %s: %s", service_name, exc.message)
        return service_name

    def uninstall(self, service_name: str) -> None:
        """Stop the service if it runs, then delete it."""
        self.status(service_name)
        try:
            self._sc("stop", service_name)
        except ServiceControlError as exc:
            # A stopped service must not block removal.
            logger.warning("Could not stop %s: %s", service_name, exc.message)
        self._sc("delete", service_name)
        logger.info("Deleted Windows service %s", service_name)

    def status(self, service_name: str) -> str:
        """Return the SCM state in lower case (``running``, ``stopped``, ...)."""
        proc = self._sc("query", service_name)
        match = _SC_STATE_RE.search(proc.stdout or "")
        return match.group(1).lower() if match else "unknown"

    def _sc(self, *args: str) -> subprocess.CompletedProcess[str]:
        command = [self._sc_exe, *args]
        proc = self._invoke(command)
        if proc.returncode == 0:
            logger.debug("%s ok", " ".join(command))
            return proc
        output = " ".join(((proc.stdout or "") + (proc.stderr or "")).split())
        kind = _SC_ERROR_KINDS.get(proc.returncode, ServiceControlErrorKind.BACKEND)
        if kind is ServiceControlErrorKind.NOT_INSTALLED:
            message = f"service '{args[1]}' is not installed"
        elif kind is ServiceControlErrorKind.ALREADY_INSTALLED:
            message = f"service '{args[1]}' is already installed"
        else:
            detail = output or "no output"
            message = f"'{' '.join(command)}' failed (exit {proc.returncode}): {detail}"
        raise ServiceControlError(
            kind, message, command=" ".join(command), win32_error=proc.returncode
        )


def service_command(config_path: Path) -> list[str]:
    """Command line the service manager runs in service mode."""
    return [sys.executable, "-m", "mdns_responder", "--config", str(config_path), "service"]


def default_service_control() -> ServiceControlBackend:
    """Pick the service-control backend for the running platform."""
    if sys.platform.startswith("linux"):
        return SystemdServiceControl()
    if sys.platform == "win32":
        return WindowsServiceControl()
    raise ServiceControlError(
        ServiceControlErrorKind.BACKEND,
        f"no service manager backend for platform '{sys.platform}'",
    )
