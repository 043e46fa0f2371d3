"""Handpick — merge extra dependency groups for one install run."""

__version__ = "0.1.0"
