"""Diff planning package for treesync.

This package provides the DiffEngine class, which classifies scanned files
into copy and delete operations and derives the directories a copy needs.
"""

from .diff_engine import DiffEngine

__all__ = ["DiffEngine"]
