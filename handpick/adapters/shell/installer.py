"""
Installer adapter — run the package manager's install command.

The command runs through a shell in the manifest's directory and
inherits this process's stdin/stdout/stderr, so the package manager's
own progress output and prompts reach the user unchanged.  Nothing is
captured.

Whatever way the child ends, ``run()`` calls ``on_exit`` before it
returns (or raises).  The caller passes the session's restore-once
callback there.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from handpick.core.errors import InstallerError, InstallInterrupted
from handpick.core.models.outcome import InstallOutcome

logger = logging.getLogger(__name__)

# Seconds to wait for the child after asking it to stop
_TERMINATE_GRACE = 10


class Installer:
    """Spawn the install command and classify how it ended."""

    def __init__(
        self,
        command: str,
        cwd: Path,
        cancel_exit_codes: Iterable[int] = (1, 130),
    ) -> None:
        self.command = command
        self.cwd = cwd
        self.cancel_exit_codes = frozenset(cancel_exit_codes)
        self._proc: subprocess.Popen | None = None

    @property
    def name(self) -> str:
        """The executable the command starts with."""
        try:
            parts = shlex.split(self.command)
        except ValueError:
            parts = self.command.split()
        return parts[0] if parts else ""

    def is_available(self) -> bool:
        return bool(self.name) and shutil.which(self.name) is not None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def run(self, on_exit: Callable[[], Any]) -> InstallOutcome:
        """Run the install command to completion.

        Raises:
            InstallerError: The shell could not be started.
        """
        if not self.is_available():
            logger.warning("'%s' not found on PATH; the shell will report it", self.name)

        logger.info("Running: %s (cwd=%s)", self.command, self.cwd)
        started_at = datetime.now(UTC).isoformat()
        start = time.monotonic()

        try:
            self._proc = subprocess.Popen(self.command, shell=True, cwd=self.cwd)
        except OSError as e:
            on_exit()
            raise InstallerError(f"Cannot start '{self.command}': {e}") from e

        interrupted: InstallInterrupted | None = None
        try:
            code = self._proc.wait()
        except InstallInterrupted as e:
            # wait() has unwound here, so the child can be reaped again
            interrupted = e
            self.terminate()
            code = self._proc.returncode
        finally:
            on_exit()

        elapsed_ms = int((time.monotonic() - start) * 1000)
        outcome = self._classify(code, interrupted)
        outcome.started_at = started_at
        outcome.ended_at = datetime.now(UTC).isoformat()
        outcome.duration_ms = elapsed_ms
        logger.info("Installer finished: %s (exit %s, %dms)", outcome.status, code, elapsed_ms)
        return outcome

    def terminate(self) -> None:
        """Stop and reap the child if it is still running.

        Must not be called from a signal handler that interrupted ``wait()``
        on the same child.
        """
        proc = self._proc
        if proc is None or proc.poll() is not None:
            return
        logger.debug("Terminating installer (pid %d)", proc.pid)
        proc.terminate()
        try:
            proc.wait(timeout=_TERMINATE_GRACE)
        except subprocess.TimeoutExpired:
            logger.warning("Installer did not stop after %ds; killing it", _TERMINATE_GRACE)
            proc.kill()
            proc.wait()

    def _classify(self, code: int | None, interrupted: InstallInterrupted | None) -> InstallOutcome:
        if interrupted is not None:
            return InstallOutcome(
                command=self.command,
                status="cancelled",
                exit_code=code,
                signal=interrupted.signame,
            )

        if code == 0:
            status = "ok"
        elif code is not None and (code < 0 or code in self.cancel_exit_codes):
            # Negative: the child itself was killed by a signal
            status = "cancelled"
        else:
            status = "failed"

        return InstallOutcome(command=self.command, status=status, exit_code=code)
