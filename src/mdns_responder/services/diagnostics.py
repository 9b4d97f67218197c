"""Read-only diagnostics: config validation and network browsing.

Neither operation registers anything on the network.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from mdns_responder.config.loader import load_config
from mdns_responder.domain.txt import build_txt_records, check_txt_size
from mdns_responder.errors import ResponderError
from mdns_responder.services.result import ServiceResult

if TYPE_CHECKING:
    from pathlib import Path

    from mdns_responder.domain.adapters import AdapterSelector
    from mdns_responder.infrastructure.zeroconf_backend import DiscoveredService

logger = logging.getLogger(__name__)

DEFAULT_BROWSE_TYPE = "_smb._tcp.local."


class Browser(Protocol):
    def browse(self, service_type: str, timeout: float) -> list[DiscoveredService]: ...


def validate_config(config_path: Path, selector: AdapterSelector) -> ServiceResult:
    """Load the config and resolve what would be advertised, without registering."""
    op = "validate"
    try:
        config = load_config(config_path)
        txt = build_txt_records(config)
        txt_size = check_txt_size(txt)
        bind_ip = selector.select(config)
    except ResponderError as exc:
        return ServiceResult(ok=False, op=op, error=exc.to_service_error())

    return ServiceResult(
        ok=True,
        op=op,
        data={
            "config_path": str(config_path),
            "service": config.full_name,
            "hostname": config.fqdn,
            "port": config.port,
            "bind_address": str(bind_ip),
            "bind_source": "config" if config.bind_address else "adapter",
            "shares": len(config.shares),
            "txt_bytes": txt_size,
        },
    )


def discover(browser: Browser, service_type: str, timeout: float) -> ServiceResult:
    """Browse the LAN for *service_type* instances for *timeout* seconds."""
    logger.info("Browsing for %s for %gs", service_type, timeout)
    services = browser.browse(service_type, timeout)
    logger.info("Discovery complete: %d service(s)", len(services))
    return ServiceResult(
        ok=True,
        op="discover",
        data={
            "service_type": service_type,
            "count": len(services),
            "services": [s.to_dict() for s in services],
        },
    )
