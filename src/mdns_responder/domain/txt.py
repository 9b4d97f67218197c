"""DNS-SD TXT record payload for a share advertisement.

Layout (RFC 6763 key=value strings):

- ``vers=3.0``, ``nt=hardware`` and ``flags=1`` first, for ``_smb._tcp``
  advertisements only (the keys SMB browsers look for)
- ``share<N>=name=<name>;path=<path>;comment=<comment>`` per share, in
  config order.  Windows paths are published with forward slashes.
- ``workgroup=<workgroup>``
- ``description=<description>`` when non-empty

Oversized payloads are rejected, never truncated.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

from mdns_responder.errors import RegistrationError, RegistrationErrorKind

MAX_TXT_STRING_BYTES = 255  # single length-prefixed character-string
MAX_TXT_PAYLOAD_BYTES = 1300  # RFC 6763 section 6.2: fit in one Ethernet packet

SMB_SERVICE_TYPE = "_smb._tcp.local."
SMB_TXT_RECORDS: dict[str, str] = {"vers": "3.0", "nt": "hardware", "flags": "1"}


class ShareLike(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def path(self) -> str: ...

    @property
    def comment(self) -> str: ...


class TxtSource(Protocol):
    @property
    def service_type(self) -> str: ...

    @property
    def shares(self) -> Iterable[ShareLike]: ...

    @property
    def workgroup(self) -> str: ...

    @property
    def description(self) -> str: ...


def encode_share(share: ShareLike) -> str:
    path = share.path.replace("\\", "/")
    return f"name={share.name};path={path};comment={share.comment}"


def build_txt_records(config: TxtSource) -> dict[str, str]:
    """Build the ordered TXT mapping for *config*."""
    records: dict[str, str] = {}
    if config.service_type.lower() == SMB_SERVICE_TYPE:
        records.update(SMB_TXT_RECORDS)
    for index, share in enumerate(config.shares):
        records[f"share{index}"] = encode_share(share)
    records["workgroup"] = config.workgroup
    if config.description:
        records["description"] = config.description
    return records


def encoded_size(records: Mapping[str, str]) -> int:
    """Wire size of *records*: one length byte plus ``key=value`` per entry."""
    return sum(1 + len(f"{key}={value}".encode()) for key, value in records.items())


def check_txt_size(records: Mapping[str, str]) -> int:
    """Validate per-entry and total TXT limits; return the encoded size.

    Raises:
        RegistrationError: ``TXT_TOO_LARGE`` naming the offending entry.
    """
    for key, value in records.items():
        size = len(f"{key}={value}".encode())
        if size > MAX_TXT_STRING_BYTES:
            raise RegistrationError(
                RegistrationErrorKind.TXT_TOO_LARGE,
                f"TXT entry '{key}' is {size} bytes, limit is {MAX_TXT_STRING_BYTES}",
                entry=key,
                size=size,
            )
    total = encoded_size(records)
    if total > MAX_TXT_PAYLOAD_BYTES:
        raise RegistrationError(
            RegistrationErrorKind.TXT_TOO_LARGE,
            f"TXT record is {total} bytes, limit is {MAX_TXT_PAYLOAD_BYTES}; "
            "shorten share comments or paths",
            size=total,
        )
    return total
