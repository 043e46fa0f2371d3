"""
Error types raised by the core.

Every error derives from ``HandpickError`` so the use cases can catch
one type at the boundary and turn it into a result with ``error`` set.
"""

from __future__ import annotations


class HandpickError(Exception):
    """Base class for all handpick failures."""


class ManifestIOError(HandpickError):
    """A manifest or sidecar file is missing, unreadable, or unwritable."""


class MalformedManifestError(HandpickError):
    """The manifest is not a JSON object, or a dependency group is not a mapping."""


class UnknownGroupError(HandpickError):
    """A requested extra dependency group is absent from the manifest."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Dependency group not found in manifest: {name}")
        self.name = name


class InstallerError(HandpickError):
    """The install command could not be spawned."""


class InstallInterrupted(HandpickError):
    """A termination signal reached this process while installing."""

    def __init__(self, signum: int, signame: str = "") -> None:
        super().__init__(f"Interrupted by {signame or f'signal {signum}'}")
        self.signum = signum
        self.signame = signame
