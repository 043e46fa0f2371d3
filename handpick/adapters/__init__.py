"""Adapters — bindings to external tools.

Public re-exports for convenient access.
"""

from handpick.adapters.shell.installer import Installer

__all__ = [
    "Installer",
]
