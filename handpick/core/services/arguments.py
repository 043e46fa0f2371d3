"""
Argument classification — split raw CLI tokens into mode and group names.

The whole token list is scanned: ``--cleanup`` may appear anywhere, and
every token ending in ``Dependencies`` names an extra group, in order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from handpick.core.models.invocation import Invocation

logger = logging.getLogger(__name__)

CLEANUP_FLAG = "--cleanup"
GROUP_SUFFIX = "Dependencies"


def is_cleanup_only(args: Iterable[str]) -> bool:
    """True iff the literal ``--cleanup`` token is present."""
    return CLEANUP_FLAG in args


def list_group_names(args: Iterable[str]) -> list[str]:
    """Every token ending in ``Dependencies``, in the order supplied."""
    return [arg for arg in args if arg.endswith(GROUP_SUFFIX)]


def classify_arguments(args: Iterable[str]) -> Invocation:
    """Classify invocation tokens.  Never fails."""
    tokens = list(args)
    groups = list_group_names(tokens)
    ignored = [t for t in tokens if t != CLEANUP_FLAG and not t.endswith(GROUP_SUFFIX)]

    if ignored:
        logger.debug("Ignoring arguments: %s", " ".join(ignored))

    return Invocation(
        cleanup_only=is_cleanup_only(tokens),
        group_names=groups,
        ignored=ignored,
    )
