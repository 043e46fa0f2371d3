"""
Tests for persistence — manifest file I/O and the sidecar backup.
"""

import json
import signal
from pathlib import Path

import pytest

from handpick.core.errors import InstallInterrupted, MalformedManifestError, ManifestIOError
from handpick.core.models.session import InstallSession
from handpick.core.persistence.backup import ManifestBackup, restore_once
from handpick.core.persistence.manifest_file import (
    dump_manifest,
    read_manifest,
    write_manifest,
)


def _backup_for(directory: Path) -> ManifestBackup:
    return ManifestBackup(directory / "package.json", directory / "package.json.temp")


class TestManifestFile:
    def test_read(self, project_dir: Path, sample_manifest: dict):
        assert read_manifest(project_dir / "package.json") == sample_manifest

    def test_read_preserves_key_order(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text('{"z": 1, "a": 2, "m": 3}')
        assert list(read_manifest(path)) == ["z", "a", "m"]

    def test_read_missing(self, tmp_path: Path):
        with pytest.raises(ManifestIOError):
            read_manifest(tmp_path / "package.json")

    def test_read_invalid_json(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("{ not json")
        with pytest.raises(MalformedManifestError):
            read_manifest(path)

    def test_read_invalid_utf8(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_bytes(b'{"devDependencies": {"a": "\xff"}}')
        with pytest.raises(MalformedManifestError, match="UTF-8"):
            read_manifest(path)

    def test_read_not_an_object(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(MalformedManifestError, match="list"):
            read_manifest(path)

    def test_dump_format(self):
        text = dump_manifest({"name": "ü", "devDependencies": {"a": "1"}})
        assert text == '{\n  "name": "ü",\n  "devDependencies": {\n    "a": "1"\n  }\n}\n'

    def test_write_roundtrip(self, tmp_path: Path):
        path = tmp_path / "package.json"
        data = {"b": {"x": "1"}, "a": []}
        write_manifest(data, path)
        assert json.loads(path.read_text(encoding="utf-8")) == data
        assert list(read_manifest(path)) == ["b", "a"]

    def test_write_leaves_no_temp_files(self, tmp_path: Path):
        write_manifest({"a": 1}, tmp_path / "package.json")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["package.json"]

    def test_write_missing_directory(self, tmp_path: Path):
        with pytest.raises(ManifestIOError):
            write_manifest({"a": 1}, tmp_path / "nope" / "package.json")


class TestManifestBackup:
    def test_backup_creates_exact_copy(self, project_dir: Path):
        backup = _backup_for(project_dir)
        backup.backup()
        assert backup.exists()
        assert backup.backup_path.read_bytes() == backup.manifest_path.read_bytes()

    def test_backup_overwrites_existing_sidecar(self, project_dir: Path):
        backup = _backup_for(project_dir)
        backup.backup_path.write_text("stale")
        backup.backup()
        assert backup.backup_path.read_bytes() == backup.manifest_path.read_bytes()

    def test_backup_missing_manifest(self, tmp_path: Path):
        with pytest.raises(ManifestIOError):
            _backup_for(tmp_path).backup()

    def test_backup_then_restore_is_identity(self, project_dir: Path):
        backup = _backup_for(project_dir)
        original = backup.manifest_path.read_bytes()

        backup.backup()
        backup.manifest_path.write_text('{"mutated": true}')
        backup.restore()

        assert backup.manifest_path.read_bytes() == original
        assert not backup.backup_path.exists()

    def test_restore_without_sidecar_leaves_manifest(self, project_dir: Path):
        backup = _backup_for(project_dir)
        original = backup.manifest_path.read_bytes()

        with pytest.raises(ManifestIOError, match="No backup"):
            backup.restore()
        assert backup.manifest_path.read_bytes() == original

    def test_restore_recreates_deleted_manifest(self, project_dir: Path):
        backup = _backup_for(project_dir)
        original = backup.manifest_path.read_bytes()
        backup.backup()
        backup.manifest_path.unlink()
        backup.restore()
        assert backup.manifest_path.read_bytes() == original


class TestRestoreOnce:
    def _session(self, backup: ManifestBackup) -> InstallSession:
        return InstallSession(manifest_path=backup.manifest_path, backup_path=backup.backup_path)

    def test_restores_after_backup(self, project_dir: Path):
        backup = _backup_for(project_dir)
        session = self._session(backup)
        original = backup.manifest_path.read_bytes()

        backup.backup()
        session.backed_up = True
        session.advance("backed_up")
        backup.manifest_path.write_text("{}")

        assert restore_once(backup, session) is True
        assert backup.manifest_path.read_bytes() == original
        assert session.restored
        assert session.phase == "restoring"

    def test_runs_only_once(self, project_dir: Path):
        backup = _backup_for(project_dir)
        session = self._session(backup)
        backup.backup()
        session.backed_up = True

        assert restore_once(backup, session) is True
        # A second call must not fail even though the sidecar is gone
        assert restore_once(backup, session) is True

    def test_skips_when_never_backed_up(self, project_dir: Path):
        backup = _backup_for(project_dir)
        backup.backup_path.write_text('{"stale": true}')
        session = self._session(backup)

        assert restore_once(backup, session) is True
        # Stale sidecar untouched, manifest untouched
        assert backup.backup_path.exists()
        assert "stale" not in backup.manifest_path.read_text()

    def test_failure_is_recorded_not_raised(self, project_dir: Path):
        backup = _backup_for(project_dir)
        session = self._session(backup)
        session.backed_up = True  # claims a backup that isn't there

        assert restore_once(backup, session) is False
        assert session.restore_error is not None
        assert restore_once(backup, session) is False

    def test_interrupted_restore_is_retried(
        self, project_dir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        backup = _backup_for(project_dir)
        session = self._session(backup)
        original = backup.manifest_path.read_bytes()
        backup.backup()
        session.backed_up = True
        backup.manifest_path.write_text('{"merged": true}')

        real_restore = ManifestBackup.restore
        calls = []

        def _restore(self):
            calls.append(1)
            if len(calls) == 1:
                raise InstallInterrupted(signal.SIGINT, "SIGINT")
            real_restore(self)

        monkeypatch.setattr(ManifestBackup, "restore", _restore)

        with pytest.raises(InstallInterrupted):
            restore_once(backup, session)
        assert not session.restored
        assert "interrupted" in session.restore_error

        assert restore_once(backup, session) is True
        assert session.restored
        assert session.restore_error is None
        assert backup.manifest_path.read_bytes() == original
        assert not backup.exists()

    def test_interrupt_after_sidecar_removed_counts_as_restored(
        self, project_dir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        backup = _backup_for(project_dir)
        session = self._session(backup)
        original = backup.manifest_path.read_bytes()
        backup.backup()
        session.backed_up = True
        real_restore = ManifestBackup.restore

        def _restore(self):
            real_restore(self)
            raise InstallInterrupted(signal.SIGTERM, "SIGTERM")

        monkeypatch.setattr(ManifestBackup, "restore", _restore)
        with pytest.raises(InstallInterrupted):
            restore_once(backup, session)

        monkeypatch.setattr(ManifestBackup, "restore", real_restore)
        assert restore_once(backup, session) is True
        assert session.restore_error is None
        assert backup.manifest_path.read_bytes() == original
