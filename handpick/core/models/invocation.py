"""
Invocation model — what the user asked for on the command line.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Invocation(BaseModel):
    """Classified command-line tokens."""

    cleanup_only: bool = False
    group_names: list[str] = Field(default_factory=list)   # in the order given
    ignored: list[str] = Field(default_factory=list)       # neither a group nor --cleanup
