"""
Cleanup use case — restore the manifest from a leftover sidecar.

For when a previous run was killed before it could restore:

    idle → restoring → done
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from handpick.core.errors import ManifestIOError
from handpick.core.models.session import InstallSession
from handpick.core.models.settings import Settings
from handpick.core.persistence.backup import ManifestBackup

logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    """Result of a cleanup-only run."""

    session: InstallSession
    restored: bool = False
    error: str | None = None

    @property
    def exit_code(self) -> int:
        return 0 if self.restored else 1

    def to_dict(self) -> dict:
        return {
            "manifest": str(self.session.manifest_path),
            "backup": str(self.session.backup_path),
            "restored": self.restored,
            "phases": self.session.history,
            "error": self.error,
        }


def run_cleanup(settings: Settings, *, base_dir: Path | None = None) -> CleanupResult:
    """Copy the sidecar back over the manifest and delete it.

    A missing sidecar is reported as an error; the manifest is left as is.
    """
    manifest_path = settings.manifest_path(base_dir)
    backup = ManifestBackup(manifest_path, settings.backup_path(base_dir))
    session = InstallSession(manifest_path=manifest_path, backup_path=backup.backup_path)
    result = CleanupResult(session=session)

    session.advance("restoring")
    try:
        backup.restore()
    except ManifestIOError as e:
        logger.debug("Cleanup failed", exc_info=True)
        result.error = str(e)
        session.restore_error = str(e)
        session.advance("failed")
        return result

    session.restored = True
    result.restored = True
    session.advance("done")
    return result
