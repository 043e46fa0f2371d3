"""
Settings model — how handpick finds the manifest and runs the installer.

Loaded from handpick.yml when one is present; every field has a default
that matches a plain npm project, so the file is optional.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_INSTALL_COMMAND = "npm install --include=dev --no-package-lock"


class Settings(BaseModel):
    """Runtime settings for one invocation."""

    manifest: str = "package.json"
    backup_suffix: str = ".temp"
    recovery_key: str = "__devDependencies"
    install_command: str = DEFAULT_INSTALL_COMMAND
    cancel_exit_codes: list[int] = Field(default_factory=lambda: [1, 130])

    @field_validator("backup_suffix", "recovery_key", "install_command", "manifest")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("recovery_key")
    @classmethod
    def _not_dev_dependencies(cls, value: str) -> str:
        if value == "devDependencies":
            raise ValueError("recovery_key must differ from 'devDependencies'")
        return value

    def manifest_path(self, base_dir: Path | None = None) -> Path:
        """Resolve the manifest path against the working directory."""
        path = Path(self.manifest)
        if path.is_absolute():
            return path
        return (base_dir or Path.cwd()) / path

    def backup_path(self, base_dir: Path | None = None) -> Path:
        """Sidecar path: the manifest path plus the backup suffix."""
        manifest = self.manifest_path(base_dir)
        return manifest.with_name(manifest.name + self.backup_suffix)
