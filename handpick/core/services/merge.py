"""
Manifest merge — fold extra dependency groups into devDependencies.

Pure in-memory transformation; no filesystem access.  The mapping passed
in is mutated and returned.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from handpick.core.errors import MalformedManifestError, UnknownGroupError

logger = logging.getLogger(__name__)

DEV_DEPENDENCIES = "devDependencies"
DEFAULT_RECOVERY_KEY = "__devDependencies"


def prepare_dev_dependencies(
    manifest: dict[str, Any],
    recovery_key: str = DEFAULT_RECOVERY_KEY,
) -> None:
    """Snapshot devDependencies into the recovery field, or create it empty.

    The recovery field is only for a human looking at the working manifest
    mid-install.  Restore never reads it.
    """
    dev = manifest.get(DEV_DEPENDENCIES)
    if dev is None:
        manifest[DEV_DEPENDENCIES] = {}
        return

    if not isinstance(dev, dict):
        raise MalformedManifestError(
            f"'{DEV_DEPENDENCIES}' must be an object, got {type(dev).__name__}"
        )
    manifest[recovery_key] = dict(dev)


def merge_group(manifest: dict[str, Any], name: str) -> None:
    """Overlay one group onto devDependencies (group values win)."""
    group = manifest.get(name)
    if group is None:
        raise UnknownGroupError(name)
    if not isinstance(group, dict):
        raise MalformedManifestError(f"'{name}' must be an object, got {type(group).__name__}")

    manifest[DEV_DEPENDENCIES].update(group)
    logger.debug("Merged %d entries from %s", len(group), name)


def merge_groups(
    manifest: dict[str, Any],
    group_names: Iterable[str],
    recovery_key: str = DEFAULT_RECOVERY_KEY,
) -> dict[str, Any]:
    """Merge each named group into devDependencies, in order (last wins).

    Stops at the first missing group with ``UnknownGroupError``; groups
    before it are already merged into ``manifest``, so callers must discard
    the mapping on error.
    """
    prepare_dev_dependencies(manifest, recovery_key)
    for name in group_names:
        merge_group(manifest, name)
    return manifest
