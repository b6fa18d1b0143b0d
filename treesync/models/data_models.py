"""
Core data models for treesync.

This module contains the following dataclasses:
- SyncTask: One source/destination pairing to reconcile
- Operation: A single planned copy or delete action
- SyncPlan: The classified copy, delete and directory sets for one task
- TaskResult: Tracks the state and results of one executed task
- SyncSummary: Summary of a whole run across all tasks
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Mapping, Optional, Tuple

from treesync.scanning.path_canonicalizer import PathCanonicalizer

from .operation_reason import OperationReason


@dataclass
class SyncTask:
    """One source -> destination pairing, both paths in canonical form."""
    source: str                       # Canonical source directory (must exist)
    destination: str                  # Canonical destination directory (created if absent)

    @classmethod
    def from_paths(
        cls,
        source: str,
        destination: str,
        cwd: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "SyncTask":
        """
        Build a task from user-supplied paths.

        Relative paths are joined onto ``cwd`` (the process working directory
        when not given) and both paths are canonicalized.

        Parameters:
            source (str): Source directory as typed by the user.
            destination (str): Destination directory as typed by the user.
            cwd (Optional[str]): Directory that relative paths are anchored to.
            environ (Optional[Mapping[str, str]]): Variables used for %NAME% expansion.

        Returns:
            SyncTask: Task with canonical source and destination paths.
        """
        canonicalizer = PathCanonicalizer(environ=environ)
        base = cwd if cwd is not None else os.getcwd()
        return cls(
            source=canonicalizer.canonicalize(
                canonicalizer.anchor(source, base), expand_variables=False
            ),
            destination=canonicalizer.canonicalize(
                canonicalizer.anchor(destination, base), expand_variables=False
            ),
        )


@dataclass(frozen=True)
class Operation:
    """A single planned file action produced by the diff engine."""
    source_path: str                  # Path to read from ("" for deletes)
    target_path: str                  # Path to write to or remove
    reason: OperationReason           # Why this operation was planned

    @property
    def key(self) -> Tuple[str, str, OperationReason]:
        """Identity of the operation, used for deduplication."""
        return (self.source_path, self.target_path, self.reason)

    @property
    def is_copy(self) -> bool:
        return self.reason.is_copy

    @property
    def is_delete(self) -> bool:
        return not self.reason.is_copy


@dataclass
class SyncPlan:
    """The classified work for one task, produced by DiffEngine.plan()."""
    task: SyncTask                    # Task being planned
    copies: List[Operation] = field(default_factory=list)      # Copy operations
    deletions: List[Operation] = field(default_factory=list)   # Delete operations
    directories: List[str] = field(default_factory=list)       # Directories to create
    source_file_count: int = 0        # Files found under the source root
    destination_file_count: int = 0   # Files found under the destination root

    @property
    def is_empty(self) -> bool:
        """True when the trees are already synchronized."""
        return not self.copies and not self.deletions


@dataclass
class TaskResult:
    """Tracks the state and results of one executed task."""
    task: SyncTask                    # Task that was synchronized
    dry_run: bool                     # Dry run mode flag
    timestamp: datetime               # Task start time
    already_synchronized: bool = False  # Early exit: nothing to do
    directories_created: int = 0      # Directories allocated before copying
    files_copied: int = 0             # Files copied or re-copied
    files_deleted: int = 0            # Files removed from the destination
    directories_pruned: int = 0       # Empty directories removed after deletion
    errors: List[str] = field(default_factory=list)  # Per-item error messages
    duration_seconds: float = 0.0     # Wall-clock time spent on the task


@dataclass
class SyncSummary:
    """Summary of a whole run returned by SyncOrchestrator.run()."""
    total_tasks: int = 0              # Number of tasks processed
    total_files_copied: int = 0       # Files copied across all tasks
    total_files_deleted: int = 0      # Files deleted across all tasks
    total_directories_created: int = 0  # Directories allocated across all tasks
    total_directories_pruned: int = 0   # Empty directories removed across all tasks
    errors: List[str] = field(default_factory=list)  # All per-item error messages
    duration_seconds: float = 0.0     # Total elapsed wall-clock time
    interrupted: bool = False         # Whether the run was interrupted by the user
