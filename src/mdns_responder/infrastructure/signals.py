"""OS termination signals routed to a single callback.

Handlers only signal; they never touch the registration.  Python runs
signal handlers on the main thread, so installation is main-thread only.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable
from types import FrameType
from typing import Any

logger = logging.getLogger(__name__)


def termination_signals() -> list[signal.Signals]:
    """SIGINT and SIGTERM, plus SIGBREAK (Ctrl-Break) on Windows."""
    signals = [signal.SIGINT, signal.SIGTERM]
    sigbreak = getattr(signal, "SIGBREAK", None)
    if sigbreak is not None:
        signals.append(sigbreak)
    return signals


def install_signal_handlers(on_signal: Callable[[str], Any]) -> Callable[[], None]:
    """Route termination signals to *on_signal(signal_name)*.

    Returns a callable restoring the previous handlers.  Outside the main
    thread nothing is installed and the returned callable is a no-op.
    """
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread; signal handlers not installed")
        return lambda: None

    def handler(signum: int, _frame: FrameType | None) -> None:
        name = signal.Signals(signum).name
        logger.info("Received %s", name)
        on_signal(name)

    previous: dict[signal.Signals, Any] = {}
    for sig in termination_signals():
        previous[sig] = signal.signal(sig, handler)

    def restore() -> None:
        for sig, old in previous.items():
            signal.signal(sig, old)

    return restore
