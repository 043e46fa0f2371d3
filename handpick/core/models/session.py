"""
InstallSession — explicit state for one handpick run.

The sidecar file on disk is what survives a crash; this object is what
the running process consults instead of probing the filesystem.  It is
shared by the backup/restore layer, the installer, and the interrupt
guard so that restore happens exactly once no matter which of them
finishes the run.

Install mode:
    idle → backed_up → merged → installing → restoring → done
    (any setup failure → restoring → failed)

Cleanup-only mode:
    idle → restoring → done
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

Phase = Literal["idle", "backed_up", "merged", "installing", "restoring", "done", "failed"]

_TRANSITIONS: dict[str, set[str]] = {
    "idle": {"backed_up", "restoring", "failed"},
    "backed_up": {"merged", "restoring", "failed"},
    "merged": {"installing", "restoring", "failed"},
    "installing": {"restoring"},
    "restoring": {"done", "failed"},
    "done": set(),
    "failed": set(),
}


class InvalidTransition(RuntimeError):
    """A phase change the state machine does not allow."""


class InstallSession(BaseModel):
    """Per-invocation state shared between backup, installer and interrupts."""

    manifest_path: Path
    backup_path: Path
    phase: Phase = "idle"
    backed_up: bool = False
    restored: bool = False
    restore_error: str | None = None
    restore_attempts: int = 0
    history: list[str] = Field(default_factory=lambda: ["idle"])

    def advance(self, phase: Phase) -> None:
        """Move to ``phase``, enforcing the state machine."""
        if phase not in _TRANSITIONS[self.phase]:
            raise InvalidTransition(f"{self.phase} → {phase}")
        self.phase = phase
        self.history.append(phase)

    @property
    def finished(self) -> bool:
        return self.phase in ("done", "failed")

    @property
    def needs_restore(self) -> bool:
        """A backup exists on disk that this run has not restored yet."""
        return self.backed_up and not self.restored
