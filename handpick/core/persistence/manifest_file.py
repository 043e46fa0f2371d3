"""
Manifest file persistence — read and pretty-write package.json.

Key order is preserved in both directions (``json`` keeps insertion
order), so the only differences between the original file and the
working copy are the merged entries and the recovery field.  Writes are
atomic (write to temp file, then rename) so an interrupt mid-write can
never leave a truncated manifest behind for the installer.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any

from handpick.core.errors import MalformedManifestError, ManifestIOError

logger = logging.getLogger(__name__)


def read_manifest(path: Path) -> dict[str, Any]:
    """Load the manifest as a JSON object.

    Raises:
        ManifestIOError: The file is missing or unreadable.
        MalformedManifestError: The content is not a JSON object.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedManifestError(f"Manifest {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ManifestIOError(f"Cannot read manifest {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedManifestError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise MalformedManifestError(
            f"Expected a JSON object in {path}, got {type(data).__name__}"
        )

    logger.debug("Read manifest %s (%d keys)", path, len(data))
    return data


def dump_manifest(data: dict[str, Any]) -> str:
    """Serialize a manifest the way package managers write it."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_manifest(data: dict[str, Any], path: Path) -> None:
    """Write the manifest (atomic).

    Raises:
        ManifestIOError: The directory is not writable.
    """
    content = dump_manifest(data)

    try:
        _fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
    except OSError as e:
        raise ManifestIOError(f"Cannot write manifest {path}: {e}") from e

    tmp = Path(tmp_path)
    try:
        with open(_fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        tmp.replace(path)
        logger.debug("Manifest written to %s", path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise ManifestIOError(f"Cannot write manifest {path}: {e}") from e
