"""Pydantic models for the advertisement configuration file.

The JSON file is the single source of what gets advertised.  Models are
frozen: a config is loaded once at startup and never hot-reloaded.

Field declaration order is the validation order: pydantic validates
fields in the order they are declared, and the loader reports the first
error only.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, StrictInt, field_validator
from pydantic_core import PydanticCustomError

MAX_INSTANCE_NAME_BYTES = 63  # DNS-SD label limit
LOCAL_SUFFIX = ".local"

_SERVICE_TYPE_RE = re.compile(r"^_[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?\._(?:tcp|udp)\.local\.$")
_HOST_LABEL_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")

# Key order of the on-disk JSON format.
FILE_KEYS = (
    "service_name",
    "instance_name",
    "port",
    "hostname",
    "workgroup",
    "description",
    "shares",
    "bind_address",
)


def _invalid(message: str, **ctx: Any) -> PydanticCustomError:
    return PydanticCustomError("config_invalid", message, ctx or None)


class ShareDefinition(BaseModel):
    """One entry of the ``shares`` array."""

    model_config = {"frozen": True, "extra": "ignore"}

    name: str
    path: str
    comment: str

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise _invalid("share name cannot be empty")
        return value


class ServiceConfig(BaseModel):
    """What to advertise: service type, instance, host, port and shares.

    Attributes:
        port: TCP/UDP port of the shared service (1-65535).
        hostname: Host name, always ending in ``.local`` (appended when
            missing).  :attr:`fqdn` adds the trailing root dot.
        service_type: DNS-SD service type, e.g. ``_smb._tcp.local.``.
            Stored under the ``service_name`` key in the JSON file.
        instance_name: Human-readable instance label (<= 63 bytes).
        shares: Ordered share definitions published in the TXT record.
        bind_address: Optional IPv4 literal overriding adapter selection.
        workgroup: SMB workgroup published in the TXT record.
        description: Free text, informational only.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    port: StrictInt
    hostname: str
    service_type: str = Field(
        validation_alias=AliasChoices("service_name", "service_type"),
        serialization_alias="service_name",
    )
    instance_name: str
    shares: tuple[ShareDefinition, ...]
    bind_address: str | None = None
    workgroup: str
    description: str

    @field_validator("port")
    @classmethod
    def _port_in_range(cls, value: int) -> int:
        if not 1 <= value <= 65535:
            raise _invalid("port must be between 1 and 65535, got {port}", port=value)
        return value

    @field_validator("hostname")
    @classmethod
    def _normalize_hostname(cls, value: str) -> str:
        host = value.strip().rstrip(".")
        if not host:
            raise _invalid("hostname cannot be empty")
        if host.lower().endswith(LOCAL_SUFFIX):
            stem = host[: -len(LOCAL_SUFFIX)]
        else:
            stem = host
        if not stem or not all(_HOST_LABEL_RE.match(label) for label in stem.split(".")):
            raise _invalid(
                "hostname '{hostname}' must contain only letters, digits and hyphens",
                hostname=value,
            )
        return f"{stem}{LOCAL_SUFFIX}"

    @field_validator("service_type")
    @classmethod
    def _service_type_pattern(cls, value: str) -> str:
        if not _SERVICE_TYPE_RE.match(value):
            raise _invalid(
                "service_name '{service_type}' must look like '_<name>._tcp.local.' "
                "or '_<name>._udp.local.'",
                service_type=value,
            )
        return value

    @field_validator("instance_name")
    @classmethod
    def _instance_name_label(cls, value: str) -> str:
        if not value.strip():
            raise _invalid("instance_name cannot be empty")
        size = len(value.encode("utf-8"))
        if size > MAX_INSTANCE_NAME_BYTES:
            raise _invalid(
                "instance_name is {size} bytes, the DNS-SD limit is {limit}",
                size=size,
                limit=MAX_INSTANCE_NAME_BYTES,
            )
        return value

    @field_validator("bind_address")
    @classmethod
    def _bind_address_ipv4(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            return str(ipaddress.IPv4Address(value.strip()))
        except ValueError:
            raise _invalid(
                "bind_address '{bind_address}' is not a valid IPv4 address",
                bind_address=value,
            ) from None

    # --- Derived values ---

    @property
    def fqdn(self) -> str:
        """Host name with the trailing root dot, as mDNS expects it."""
        return f"{self.hostname}."

    @property
    def full_name(self) -> str:
        """Fully-qualified service instance name."""
        return f"{self.instance_name}.{self.service_type}"

    def to_file_dict(self) -> dict[str, Any]:
        """Serialize using the on-disk key names and order."""
        raw = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return {key: raw[key] for key in FILE_KEYS if key in raw}


def default_config() -> ServiceConfig:
    """Stock advertisement written on install when no config exists."""
    return ServiceConfig(
        service_type="_smb._tcp.local.",
        instance_name="Windows-Share",
        port=445,
        hostname="windows-pc.local",
        workgroup="WORKGROUP",
        description="Windows SMB Share via mDNS",
        shares=(
            ShareDefinition(
                name="Public",
                path="C:\\Users\\Public\\Documents",
                comment="Public shared folder",
            ),
        ),
    )
