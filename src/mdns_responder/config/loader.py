"""Config file location, loading and saving.

The advertisement config lives at a fixed, platform-specific path (see
:func:`default_config_path`).  ``--config`` and ``MDNS_RESPONDER_CONFIG_PATH``
override it for testing and non-standard installs.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path, PureWindowsPath
from typing import Any

from pydantic import ValidationError

from mdns_responder.config.models import ServiceConfig
from mdns_responder.errors import ConfigError, ConfigErrorKind

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
_WINDOWS_CONFIG_DIR = PureWindowsPath("C:/ProgramData/MDNSResponder")
_POSIX_CONFIG_DIR = Path("/etc/mdns-responder")


def default_config_path() -> Path:
    """Return the fixed config location for the current platform."""
    if sys.platform == "win32":
        return Path(_WINDOWS_CONFIG_DIR / CONFIG_FILENAME)
    return _POSIX_CONFIG_DIR / CONFIG_FILENAME


def _error_field(error: dict[str, Any]) -> str:
    """Render a pydantic error location as ``shares[0].name``."""
    parts: list[str] = []
    for item in error.get("loc", ()):
        if isinstance(item, int):
            parts.append(f"[{item}]")
        else:
            parts.append(f".{item}" if parts else str(item))
    field = "".join(parts) or "<root>"
    return "service_name" if field == "service_type" else field


def parse_config(data: Any, *, path: Path | None = None) -> ServiceConfig:
    """Validate an already-decoded JSON document.

    Raises:
        ConfigError: ``MALFORMED`` if *data* is not an object, ``INVALID``
            (with the failing field) on the first validation failure.
    """
    if not isinstance(data, dict):
        msg = f"config must be a JSON object, got {type(data).__name__}"
        raise ConfigError(ConfigErrorKind.MALFORMED, msg, path=path)
    try:
        return ServiceConfig.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = _error_field(first)
        if first.get("type") == "missing":
            msg = f"missing required field '{field}'"
        else:
            msg = f"invalid value for '{field}': {first['msg']}"
        raise ConfigError(ConfigErrorKind.INVALID, msg, field=field, path=path) from exc


def load_config(path: Path) -> ServiceConfig:
    """Load and validate the advertisement config from *path*.

    Raises:
        ConfigError: ``NOT_FOUND``, ``MALFORMED`` or ``INVALID``.
    """
    if not path.is_file():
        raise ConfigError(
            ConfigErrorKind.NOT_FOUND, f"config file not found: {path}", path=path
        )
    try:
        raw = path.read_bytes()
    except OSError as exc:
        msg = f"cannot read config file {path}: {exc}"
        raise ConfigError(ConfigErrorKind.MALFORMED, msg, path=path) from exc
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = f"invalid JSON in {path}: {exc}"
        raise ConfigError(ConfigErrorKind.MALFORMED, msg, path=path) from exc

    config = parse_config(data, path=path)
    logger.debug("Loaded config from %s: %s", path, config.full_name)
    return config


def save_config(config: ServiceConfig, path: Path) -> Path:
    """Write *config* as pretty JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(config.to_file_dict(), indent=2, ensure_ascii=False)
    path.write_text(payload + "\n", encoding="utf-8")
    logger.debug("Wrote config to %s", path)
    return path
