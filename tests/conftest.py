"""
Shared test fixtures and configuration.
"""

import json
from pathlib import Path

import pytest

from handpick.core.models.settings import Settings


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's HANDPICK_* variables out of the tests."""
    for name in (
        "HANDPICK_MANIFEST",
        "HANDPICK_INSTALL_COMMAND",
        "HANDPICK_LOG_LEVEL",
        "HANDPICK_LOG_FILE",
        "HANDPICK_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_manifest() -> dict:
    """A small package.json with one extra group."""
    return {
        "name": "demo",
        "version": "1.0.0",
        "dependencies": {"left-pad": "^1.3.0"},
        "devDependencies": {"eslint": "^8.0.0", "typescript": "^5.0.0"},
        "optionalDependencies": {"fsevents": "^2.3.0"},
        "buildDependencies": {"typescript": "^5.4.0", "esbuild": "^0.20.0"},
    }


@pytest.fixture
def project_dir(tmp_path: Path, sample_manifest: dict) -> Path:
    """A temp directory holding package.json (2-space indented, like npm)."""
    (tmp_path / "package.json").write_text(
        json.dumps(sample_manifest, indent=2) + "\n", encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def settings() -> Settings:
    """Settings whose installer is a no-op shell command."""
    return Settings(install_command="true")
