"""
InstallOutcome — the result of one installer run.

Like a receipt: the installer never raises for a nonzero exit, it
reports the exit here and lets the caller decide what it means.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class InstallOutcome(BaseModel):
    """How the install command ended."""

    command: str
    status: Literal["ok", "cancelled", "failed"] = "ok"
    exit_code: int | None = None
    signal: str | None = None   # set when this process was interrupted

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        """Whether the installer succeeded."""
        return self.status == "ok"

    @property
    def cancelled(self) -> bool:
        """Whether the run was cancelled (signal or cancel exit code)."""
        return self.status == "cancelled"

    @property
    def failed(self) -> bool:
        """Whether the installer exited with a non-cancel error code."""
        return self.status == "failed"
