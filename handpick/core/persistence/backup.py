"""
Manifest backup — the sidecar copy taken before the manifest is rewritten.

The sidecar (``package.json.temp`` by default) is a byte-for-byte copy of
the manifest.  While it exists it is the authoritative original: restore
copies it back over the manifest and only then deletes it.  It is left
on disk if the process is killed outright, and ``handpick --cleanup``
puts things right afterwards.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from handpick.core.errors import ManifestIOError
from handpick.core.models.session import InstallSession

logger = logging.getLogger(__name__)


class ManifestBackup:
    """Backup/restore pair for one manifest path."""

    def __init__(self, manifest_path: Path, backup_path: Path) -> None:
        self.manifest_path = manifest_path
        self.backup_path = backup_path

    def exists(self) -> bool:
        return self.backup_path.is_file()

    def backup(self) -> None:
        """Copy the manifest to the sidecar, overwriting any existing sidecar."""
        try:
            shutil.copyfile(self.manifest_path, self.backup_path)
        except OSError as e:
            raise ManifestIOError(
                f"Cannot back up {self.manifest_path} to {self.backup_path}: {e}"
            ) from e
        logger.info("Backed up %s → %s", self.manifest_path, self.backup_path)

    def restore(self) -> None:
        """Copy the sidecar back over the manifest, then delete the sidecar.

        The primary manifest is not touched when the sidecar is missing.
        """
        if not self.exists():
            raise ManifestIOError(f"No backup to restore: {self.backup_path} does not exist")

        try:
            shutil.copyfile(self.backup_path, self.manifest_path)
        except OSError as e:
            raise ManifestIOError(
                f"Cannot restore {self.manifest_path} from {self.backup_path}: {e}"
            ) from e

        try:
            self.backup_path.unlink()
        except OSError as e:
            raise ManifestIOError(f"Restored, but cannot remove {self.backup_path}: {e}") from e

        logger.info("Restored %s from %s", self.manifest_path, self.backup_path)


def restore_once(backup: ManifestBackup, session: InstallSession) -> bool:
    """Best-effort restore for a session, completed at most once.

    Every path that ends a run (installer exit, interrupt, setup failure)
    calls this.  File errors are logged and recorded on the session, never
    raised.  Anything else that cuts the restore short (an interrupt) is
    recorded and re-raised, and the session stays unrestored so the next
    call tries again.

    Returns:
        True if the manifest is back to its original state (or was never
        touched), False if the restore failed.
    """
    if session.restored:
        return session.restore_error is None

    if not session.finished and session.phase != "restoring":
        session.advance("restoring")

    if not session.backed_up:
        # Nothing was written yet; a stale sidecar from another run is left alone
        session.restored = True
        return True

    if session.restore_attempts and not backup.exists():
        # The sidecar is only removed after it was copied back
        logger.debug("Earlier restore attempt completed before it was cut short")
        session.restored = True
        session.restore_error = None
        return True

    session.restore_attempts += 1
    try:
        backup.restore()
    except ManifestIOError as e:
        session.restored = True
        session.restore_error = str(e)
        logger.error("Restore failed: %s", e)
        logger.error("Run 'handpick --cleanup' to retry once the problem is fixed.")
        return False
    except BaseException as e:
        session.restore_error = f"Restore interrupted: {e or type(e).__name__}"
        logger.error("%s", session.restore_error)
        raise

    session.restored = True
    session.restore_error = None
    return True
