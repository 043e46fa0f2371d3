"""
Interrupt guard — route termination signals and faults into one cleanup path.

Registered once around an install run.  A hang-up/interrupt/quit/terminate
signal is recorded and turned into ``InstallInterrupted``; the handler
itself does no I/O and never waits on the child.  The exception unwinds
through the installer, which stops and reaps the child, and through the
``finally`` blocks that call the same restore-once path used on normal
exit.  Only the first signal raises; repeats are logged and ignored so
that a second Ctrl+C cannot cut the restore short.

An exception escaping the guarded block (an uncaught fault) runs the
cleanup callback from ``__exit__``, after the stack has unwound.

SIGKILL cannot be caught: a hard kill of the process tree leaves the
sidecar behind, and ``handpick --cleanup`` recovers from it.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable
from types import FrameType
from typing import Any

from handpick.core.errors import InstallInterrupted

logger = logging.getLogger(__name__)

# Not every platform defines all of these (no SIGHUP/SIGQUIT on Windows)
SIGNAL_NAMES = ("SIGHUP", "SIGINT", "SIGQUIT", "SIGTERM")


def available_signals() -> list[signal.Signals]:
    """The handled signals this platform actually has."""
    return [getattr(signal, name) for name in SIGNAL_NAMES if hasattr(signal, name)]


class InterruptGuard:
    """Context manager that turns signals into ``InstallInterrupted``."""

    def __init__(self, on_fault: Callable[[], Any]) -> None:
        self._on_fault = on_fault
        self._previous: dict[signal.Signals, Any] = {}
        self.interrupted_by: str | None = None
        self.triggered_by: str | None = None

    def __enter__(self) -> InterruptGuard:
        if threading.current_thread() is not threading.main_thread():
            # signal.signal() only works in the main thread
            logger.debug("Not in main thread; signal cleanup disabled")
            return self

        for sig in available_signals():
            self._previous[sig] = signal.getsignal(sig)
            signal.signal(sig, self._handle_signal)
        logger.debug("Interrupt guard armed for %s", ", ".join(s.name for s in self._previous))
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()

        if exc_type is not None and not issubclass(exc_type, InstallInterrupted):
            self.trigger(f"uncaught {exc_type.__name__}")
        return False

    def trigger(self, reason: str) -> None:
        """Run the fault cleanup for ``reason``; later triggers only log."""
        if self.triggered_by is not None:
            logger.debug("Cleanup already ran (%s); ignoring %s", self.triggered_by, reason)
            return
        self.triggered_by = reason
        logger.warning("%s — restoring manifest", reason)
        try:
            self._on_fault()
        except Exception as e:
            # Cleanup is best effort on this path
            logger.error("Cleanup after %s failed: %s", reason, e)

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        name = signal.Signals(signum).name
        if self.interrupted_by is not None:
            logger.warning("Already stopping (%s); ignoring %s", self.interrupted_by, name)
            return
        self.interrupted_by = name
        logger.warning("Received %s; stopping installer and restoring manifest", name)
        raise InstallInterrupted(signum, name)
