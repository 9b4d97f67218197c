"""Runtime settings: CLI flags and env vars in one object.

Priority chain (highest to lowest):
  1. Init kwargs  (CLI flags passed by Click)
  2. Env vars     (``MDNS_RESPONDER_*`` prefix)
  3. Code defaults

These are process knobs (where the config lives, output format, shutdown
timing).  What gets advertised lives in the JSON config file, see
:mod:`mdns_responder.config.models`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

from mdns_responder.config.loader import default_config_path

DEFAULT_GRACE_TIMEOUT = 5.0
DEFAULT_WATCH_INTERVAL = 30.0


class ResponderSettings(BaseSettings):
    """Unified settings for the mdns-responder CLI and daemon.

    Frozen after construction and stored on the CLI's ``AppContext``.

    Attributes:
        config_path: Advertisement config file.
        grace_timeout: Seconds to wait for unregistration at shutdown.
        watch_interval: Seconds between checks that the advertised address
            is still assigned; ``0`` disables the watchdog.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "MDNS_RESPONDER_",
    }

    config_path: Path = Field(default_factory=default_config_path)

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- Lifecycle tuning ---
    grace_timeout: float = Field(default=DEFAULT_GRACE_TIMEOUT, gt=0)
    watch_interval: float = Field(default=DEFAULT_WATCH_INTERVAL, ge=0)

    @classmethod
    def from_cli(cls, **cli_flags: Any) -> ResponderSettings:
        """Construct settings from a CLI invocation.

        Flags left at ``None`` (options the user did not pass) fall through
        to env vars and defaults.
        """
        return cls(**{k: v for k, v in cli_flags.items() if v is not None})

    def with_overrides(self, **overrides: Any) -> ResponderSettings:
        """Return a copy with per-command overrides applied (``None`` ignored)."""
        update = {k: v for k, v in overrides.items() if v is not None}
        if not update:
            return self
        return self.model_copy(update=update)
