"""
Domain models — Pydantic types for handpick.

All models are re-exported here for convenient access:

    from handpick.core.models import Invocation, InstallOutcome, InstallSession, Settings
"""

from handpick.core.models.invocation import Invocation
from handpick.core.models.outcome import InstallOutcome
from handpick.core.models.session import InstallSession, InvalidTransition, Phase
from handpick.core.models.settings import DEFAULT_INSTALL_COMMAND, Settings

__all__ = [
    "DEFAULT_INSTALL_COMMAND",
    "InstallOutcome",
    "InstallSession",
    "InvalidTransition",
    "Invocation",
    "Phase",
    "Settings",
]
