"""Error taxonomy: one exception family per failure domain.

Each domain error carries a ``kind`` tag and enough context (field name,
adapter, backend cause) to be logged without re-deriving it.  The CLI
composes them into a single :class:`ServiceResult` failure at the
orchestration boundary, using the stable exit code of the domain.

Exit codes (stable across releases):

====  ===============================
0     clean shutdown / success
1     unexpected failure
2     usage error (reported by Click)
3     configuration failure
4     adapter selection failure
5     registration failure
6     service-control failure
====  ===============================
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mdns_responder.services.result import ServiceError


class ExitCode(IntEnum):
    """Process exit codes."""

    OK = 0
    FAILURE = 1
    USAGE = 2
    CONFIG = 3
    ADAPTER = 4
    REGISTRATION = 5
    SERVICE_CONTROL = 6


class ConfigErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"
    INVALID = "invalid"


class AdapterErrorKind(StrEnum):
    NO_SUITABLE_ADAPTER = "no_suitable_adapter"
    INVALID_OVERRIDE = "invalid_override"
    ENUMERATION_FAILED = "enumeration_failed"


class RegistrationErrorKind(StrEnum):
    TXT_TOO_LARGE = "txt_too_large"
    BACKEND = "backend"
    ALREADY_REGISTERED = "already_registered"


class ServiceControlErrorKind(StrEnum):
    PERMISSION_DENIED = "permission_denied"
    ALREADY_INSTALLED = "already_installed"
    NOT_INSTALLED = "not_installed"
    BACKEND = "backend"


class ResponderError(Exception):
    """Base class for every fatal mdns-responder error.

    Attributes:
        kind: Domain-specific tag (one of the ``*ErrorKind`` enums).
        message: Human-readable description.
        detail: Structured context for logs and ``--json`` output.
    """

    domain = "responder"
    exit_code = ExitCode.FAILURE

    def __init__(self, kind: StrEnum, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.detail = {k: v for k, v in detail.items() if v is not None}

    @property
    def code(self) -> str:
        """Stable error code, e.g. ``CONFIG_INVALID``."""
        return f"{self.domain}_{self.kind}".upper()

    def to_service_error(self) -> ServiceError:
        from mdns_responder.services.result import ServiceError

        return ServiceError(
            code=self.code,
            message=self.message,
            detail={k: str(v) for k, v in self.detail.items()},
            exit_code=int(self.exit_code),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind!s}, {self.message!r})"


class ConfigError(ResponderError):
    """Configuration could not be found, parsed, or validated."""

    domain = "config"
    exit_code = ExitCode.CONFIG

    def __init__(
        self,
        kind: ConfigErrorKind,
        message: str,
        *,
        field: str | None = None,
        path: object = None,
    ) -> None:
        super().__init__(kind, message, field=field, path=path)
        self.field = field


class AdapterError(ResponderError):
    """No network adapter could provide an address to advertise."""

    domain = "adapter"
    exit_code = ExitCode.ADAPTER

    def __init__(self, kind: AdapterErrorKind, message: str, **detail: Any) -> None:
        super().__init__(kind, message, **detail)


class RegistrationError(ResponderError):
    """Advertisement could not be built, registered, or unregistered."""

    domain = "registration"
    exit_code = ExitCode.REGISTRATION

    def __init__(
        self,
        kind: RegistrationErrorKind,
        message: str,
        *,
        cause: BaseException | None = None,
        **detail: Any,
    ) -> None:
        if cause is not None:
            detail.setdefault("cause", f"{type(cause).__name__}: {cause}")
        super().__init__(kind, message, **detail)
        self.cause = cause


class ServiceControlError(ResponderError):
    """The host service manager refused or failed an operation."""

    domain = "service_control"
    exit_code = ExitCode.SERVICE_CONTROL

    def __init__(
        self,
        kind: ServiceControlErrorKind,
        message: str,
        *,
        cause: BaseException | None = None,
        **detail: Any,
    ) -> None:
        if cause is not None:
            detail.setdefault("cause", f"{type(cause).__name__}: {cause}")
        super().__init__(kind, message, **detail)
        self.cause = cause
