"""
Install use case — back up, merge, write, install, restore.

    idle → backed_up → merged → installing → restoring → done

Any failure before the installer starts skips straight to restoring
(best effort) and ends in ``failed``; the manifest on disk is never
left in its merged form.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from handpick.adapters.shell.installer import Installer
from handpick.core.errors import HandpickError, InstallInterrupted
from handpick.core.models.invocation import Invocation
from handpick.core.models.outcome import InstallOutcome
from handpick.core.models.session import InstallSession
from handpick.core.models.settings import Settings
from handpick.core.persistence.backup import ManifestBackup, restore_once
from handpick.core.persistence.manifest_file import read_manifest, write_manifest
from handpick.core.reliability.interrupts import InterruptGuard
from handpick.core.services.merge import merge_groups

logger = logging.getLogger(__name__)

# Exit status used when the run was cancelled (128 + SIGINT)
EXIT_CANCELLED = 130


@dataclass
class InstallResult:
    """Result of one install run."""

    session: InstallSession
    group_names: list[str] = field(default_factory=list)
    dry_run: bool = False
    working_manifest: dict[str, Any] | None = None
    outcome: InstallOutcome | None = None
    interrupted: str | None = None      # signal name, if this process was interrupted
    error: str | None = None
    error_type: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.error or self.session.restore_error:
            return "error"
        if self.interrupted:
            return "cancelled"
        if self.outcome is not None:
            return self.outcome.status
        return "ok"

    @property
    def exit_code(self) -> int:
        status = self.status
        if status == "error":
            return 1
        if status == "cancelled":
            return EXIT_CANCELLED
        if status == "failed":
            return (self.outcome.exit_code if self.outcome else None) or 1
        return 0

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "exit_code": self.exit_code,
            "manifest": str(self.session.manifest_path),
            "groups": self.group_names,
            "dry_run": self.dry_run,
            "phases": self.session.history,
            "restored": self.session.restored and self.session.restore_error is None,
            "restore_error": self.session.restore_error,
            "interrupted": self.interrupted,
            "error": self.error,
            "error_type": self.error_type,
            "warnings": self.warnings,
            "outcome": self.outcome.model_dump() if self.outcome else None,
        }


def run_install(
    invocation: Invocation,
    settings: Settings,
    *,
    base_dir: Path | None = None,
    dry_run: bool = False,
    before_install: Callable[[InstallResult], Any] | None = None,
) -> InstallResult:
    """Merge the requested groups into devDependencies and run the installer.

    Args:
        invocation: Classified command-line tokens.
        settings: Manifest location, installer command, cancel codes.
        base_dir: Directory holding the manifest (default: cwd).
        dry_run: Stop after writing the working manifest; no installer.
        before_install: Called with the result once the working manifest
            is on disk, just before the installer starts.

    Returns:
        InstallResult.  Errors are reported on the result, not raised.
    """
    manifest_path = settings.manifest_path(base_dir)
    backup = ManifestBackup(manifest_path, settings.backup_path(base_dir))
    session = InstallSession(manifest_path=manifest_path, backup_path=backup.backup_path)
    installer = Installer(
        settings.install_command,
        cwd=manifest_path.parent,
        cancel_exit_codes=settings.cancel_exit_codes,
    )
    result = InstallResult(
        session=session,
        group_names=list(invocation.group_names),
        dry_run=dry_run,
    )

    if backup.exists():
        msg = (
            f"Found {backup.backup_path.name} from an earlier run; it will be overwritten. "
            "Run 'handpick --cleanup' first if that run was killed."
        )
        logger.warning(msg)
        result.warnings.append(msg)

    def _finish() -> None:
        installer.terminate()
        restore_once(backup, session)

    with InterruptGuard(_finish):
        try:
            backup.backup()
            session.backed_up = True
            session.advance("backed_up")

            manifest = read_manifest(manifest_path)
            merge_groups(manifest, invocation.group_names, settings.recovery_key)
            write_manifest(manifest, manifest_path)
            session.advance("merged")
            result.working_manifest = manifest

            if before_install is not None:
                before_install(result)

            if not dry_run:
                session.advance("installing")
                result.outcome = installer.run(on_exit=lambda: restore_once(backup, session))
                result.interrupted = result.outcome.signal

        except InstallInterrupted as e:
            result.interrupted = e.signame
        except HandpickError as e:
            logger.debug("Install aborted in phase %s", session.phase, exc_info=True)
            result.error = str(e)
            result.error_type = type(e).__name__
        finally:
            try:
                restore_once(backup, session)
            except InstallInterrupted as e:
                # Only the first signal raises, so the retry runs undisturbed
                result.interrupted = result.interrupted or e.signame
                restore_once(backup, session)

    session.advance("failed" if result.status == "error" else "done")
    return result
