"""
Diff planning for treesync.

The DiffEngine classifies the files of a source and a destination tree into
the copy set, the delete set and the directories that must exist before any
copy runs. Files are matched by relative path; two matched files are equal
when their byte sizes are equal. Contents are never read.

Relative paths come from stripping the root's literal prefix. Roots must
therefore be canonical and ``/``-terminated, and every scanned path must start
with its root string (both guaranteed by treesync.scanning).
"""

import logging
import os
from typing import Dict, Iterable, List, Optional, Set, Tuple

from treesync.models import Operation, OperationReason, SyncPlan, SyncTask

logger = logging.getLogger(__name__)

OperationKey = Tuple[str, str, OperationReason]


class DiffEngine:
    """
    Plans the copy and delete operations that make a destination mirror a source.

    Operations are collected in dicts keyed by ``Operation.key`` so that a
    planned action is recorded once, and returned sorted by target path.
    """

    SEPARATOR = "/"

    def plan(
        self,
        task: SyncTask,
        source_files: Set[str],
        destination_files: Set[str],
    ) -> SyncPlan:
        """
        Build the full plan for one task.

        Parameters:
            task (SyncTask): Task with canonical, ``/``-terminated roots.
            source_files (Set[str]): Canonical file paths under ``task.source``.
            destination_files (Set[str]): Canonical file paths under ``task.destination``.

        Returns:
            SyncPlan: Copy set, delete set and directory-allocation set. When both
            operation sets are empty no directories are planned either.
        """
        copies = self.plan_copies(task, source_files, destination_files)
        deletions = self.plan_deletions(task, source_files, destination_files)

        directories = self.plan_directories(copies) if copies else []

        return SyncPlan(
            task=task,
            copies=copies,
            deletions=deletions,
            directories=directories,
            source_file_count=len(source_files),
            destination_file_count=len(destination_files),
        )

    def plan_copies(
        self,
        task: SyncTask,
        source_files: Iterable[str],
        destination_files: Iterable[str],
    ) -> List[Operation]:
        """
        Plan a copy for every source file that is missing from, or differs in size in, the destination.

        Parameters:
            task (SyncTask): Task with canonical roots.
            source_files (Iterable[str]): Canonical file paths under the source root.
            destination_files (Iterable[str]): Canonical file paths under the destination root.

        Returns:
            List[Operation]: Copy operations with reason MISSING_IN_DESTINATION or
            SIZE_MISMATCH, sorted by target path.
        """
        destination_by_relative = self._index_by_relative_path(task.destination, destination_files)
        planned: Dict[OperationKey, Operation] = {}

        for source_file in source_files:
            relative = self.relative_path(task.source, source_file)
            target = task.destination + relative

            if relative not in destination_by_relative:
                operation = Operation(source_file, target, OperationReason.MISSING_IN_DESTINATION)
            elif self._sizes_differ(source_file, destination_by_relative[relative]):
                operation = Operation(source_file, target, OperationReason.SIZE_MISMATCH)
            else:
                continue

            planned[operation.key] = operation
            logger.debug(f"Plan copy ({operation.reason.value}): {relative}")

        return sorted(planned.values(), key=lambda op: op.target_path)

    def plan_deletions(
        self,
        task: SyncTask,
        source_files: Iterable[str],
        destination_files: Iterable[str],
    ) -> List[Operation]:
        """
        Plan a delete for every destination file whose relative path does not exist in the source.

        Files present in both trees are never deleted, whatever their sizes.

        Returns:
            List[Operation]: Delete operations with reason MISSING_IN_SOURCE and an
            empty source path, sorted by target path.
        """
        source_relatives = set(self._index_by_relative_path(task.source, source_files))
        planned: Dict[OperationKey, Operation] = {}

        for destination_file in destination_files:
            relative = self.relative_path(task.destination, destination_file)
            if relative in source_relatives:
                continue

            operation = Operation("", destination_file, OperationReason.MISSING_IN_SOURCE)
            planned[operation.key] = operation
            logger.debug(f"Plan delete ({operation.reason.value}): {relative}")

        return sorted(planned.values(), key=lambda op: op.target_path)

    def plan_directories(self, copies: Iterable[Operation]) -> List[str]:
        """
        Return the parent directories of the copy targets that are not directories yet.

        Parents are taken by string slice up to the last separator, so only
        directories that will actually receive a file are created.
        """
        parents: Set[str] = set()
        for operation in copies:
            parent = self.parent_directory(operation.target_path)
            if parent:
                parents.add(parent)

        return sorted(p for p in parents if not os.path.isdir(p))

    @classmethod
    def relative_path(cls, root: str, path: str) -> str:
        """
        Strip the literal ``root`` prefix from ``path``.

        Raises:
            ValueError: If ``path`` does not start with ``root``; this means the
                two were not canonicalized consistently.
        """
        if not path.startswith(root):
            raise ValueError(f"Path {path!r} is not under root {root!r}")
        return path[len(root):]

    @classmethod
    def parent_directory(cls, path: str) -> Optional[str]:
        index = path.rfind(cls.SEPARATOR)
        if index <= 0:
            return None
        return path[:index]

    def _index_by_relative_path(self, root: str, files: Iterable[str]) -> Dict[str, str]:
        return {self.relative_path(root, f): f for f in files}

    @staticmethod
    def _sizes_differ(source_file: str, destination_file: str) -> bool:
        """Compare byte sizes; an unreadable size counts as a mismatch."""
        try:
            return os.path.getsize(source_file) != os.path.getsize(destination_file)
        except OSError as e:
            logger.warning(f"Cannot compare sizes of {source_file} and {destination_file}: {e}")
            return True
