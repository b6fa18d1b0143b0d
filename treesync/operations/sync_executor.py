"""
Plan execution for treesync.

This module contains the SyncExecutor class, which applies a SyncPlan to the
filesystem in fixed phases: allocate directories, copy files, delete files
and prune directories left without files. Destination entries whose type
differs from the source (a directory where the source has a file, or the
reverse) are cleared before the first phase.
"""

import logging
import os
import shutil
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Set, TypeVar

from treesync.models import Operation, SyncPlan, TaskResult
from treesync.scanning import TreeScanner

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (phase, completed, total, path)
ProgressCallback = Callable[[str, int, int, str], None]


class SyncExecutor:
    """
    Applies planned operations with per-item failure isolation.

    Items of the allocate, copy and delete phases target distinct paths and
    are dispatched to a thread pool; each phase is joined before the next one
    starts. A failing item is logged, recorded on the TaskResult and skipped;
    it never aborts its phase or the phases after it.
    """

    DEFAULT_WORKERS = 8

    PHASE_ALLOCATE = "Allocate directories"
    PHASE_COPY = "Copy files"
    PHASE_DELETE = "Remove files"
    PHASE_PRUNE = "Remove empty directories"

    def __init__(
        self,
        max_workers: int = DEFAULT_WORKERS,
        progress_callback: Optional[ProgressCallback] = None,
        dry_run: bool = False,
        scanner: Optional[TreeScanner] = None,
    ) -> None:
        """
        Create a SyncExecutor.

        Parameters:
            max_workers (int): Thread pool size per phase; 1 runs items sequentially.
            progress_callback (Optional[ProgressCallback]): Called after every completed
                item with (phase, completed, total, path).
            dry_run (bool): If True, count operations without touching the filesystem.
            scanner (Optional[TreeScanner]): Used for the recursive "has files" check
                during pruning.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.progress_callback = progress_callback
        self.dry_run = dry_run
        self._scanner = scanner if scanner is not None else TreeScanner()

    def execute(self, plan: SyncPlan) -> TaskResult:
        """
        Run all phases for ``plan`` and return the accumulated result.

        An empty plan is reported as already synchronized and no phase runs.
        """
        result = TaskResult(task=plan.task, dry_run=self.dry_run, timestamp=datetime.now())
        start_time = time.time()

        if plan.is_empty:
            result.already_synchronized = True
            result.duration_seconds = time.time() - start_time
            return result

        cleared = self.clear_conflicts(plan, result)
        self.allocate_directories(plan.directories, result)
        self.copy_files(plan.copies, result)
        cleared_targets = set(cleared)
        remaining = [op for op in plan.deletions if op.target_path not in cleared_targets]
        deleted = cleared + self.delete_files(remaining, result)
        self.prune_directories(
            deleted,
            plan.task.destination,
            result,
            keep={op.target_path for op in plan.copies},
        )

        result.duration_seconds = time.time() - start_time
        return result

    def clear_conflicts(self, plan: SyncPlan, result: TaskResult) -> List[str]:
        """
        Remove destination entries whose type differs from the source.

        A directory standing where the source has a file is removed with its
        contents, and a file standing where a planned directory (or one of its
        ancestors) must go is removed. Every file removed this way is a planned
        delete target. Runs sequentially before the allocate phase.

        Returns:
            List[str]: Delete targets that went away (or would, in dry-run mode)
            with a conflicting entry. They count as deleted files.
        """
        deletion_targets = {op.target_path for op in plan.deletions}
        cleared: List[str] = []

        for operation in plan.copies:
            target = operation.target_path
            if not os.path.isdir(target):
                continue
            contained = sorted(t for t in deletion_targets if t.startswith(target + "/"))
            if self._clear_path(target, result):
                cleared.extend(contained)

        blocking: Set[str] = set()
        for directory in plan.directories:
            for path in [directory] + self._parents_below(directory, plan.task.destination):
                if path in deletion_targets and not os.path.isdir(path):
                    blocking.add(path)
        for path in sorted(blocking):
            if self._clear_path(path, result):
                cleared.append(path)

        result.files_deleted += len(cleared)
        return cleared

    def _clear_path(self, path: str, result: TaskResult) -> bool:
        if self.dry_run:
            logger.debug(f"[DRY RUN] Would replace conflicting entry: {path}")
            return True
        try:
            if os.path.isdir(path):
                shutil.rmtree(path)
            else:
                os.remove(path)
        except OSError as e:
            self._record_failure(f"Replace conflicting entry error: {path} - {e}", result)
            return False
        logger.debug(f"Removed conflicting entry: {path}")
        return True

    def allocate_directories(self, directories: Sequence[str], result: TaskResult) -> List[str]:
        """Create each directory with its missing ancestors."""
        def allocate(directory: str) -> None:
            if self.dry_run:
                logger.debug(f"[DRY RUN] Would create directory: {directory}")
                return
            os.makedirs(directory, exist_ok=True)

        created = self._run_phase(
            self.PHASE_ALLOCATE,
            directories,
            allocate,
            describe=lambda d: d,
            failure=lambda d, e: f"Create directory error: {d} - {e}",
            result=result,
        )
        result.directories_created += len(created)
        return created

    def copy_files(self, copies: Sequence[Operation], result: TaskResult) -> List[Operation]:
        """Copy each source file onto its target, overwriting the target."""
        def copy(operation: Operation) -> None:
            if self.dry_run:
                logger.debug(
                    f"[DRY RUN] Would copy ({operation.reason.value}): "
                    f"{operation.source_path} -> {operation.target_path}"
                )
                return
            # copyfile refuses a directory target instead of copying into it
            shutil.copyfile(operation.source_path, operation.target_path)
            shutil.copystat(operation.source_path, operation.target_path)

        copied = self._run_phase(
            self.PHASE_COPY,
            copies,
            copy,
            describe=lambda op: op.target_path,
            failure=lambda op, e: (
                f"Copy file error ({op.reason.value}): "
                f"{op.source_path} -> {op.target_path} - {e}"
            ),
            result=result,
        )
        result.files_copied += len(copied)
        return copied

    def delete_files(self, deletions: Sequence[Operation], result: TaskResult) -> List[str]:
        """
        Remove each target file.

        Returns:
            List[str]: Targets that were removed (or would be, in dry-run mode).
        """
        def delete(operation: Operation) -> None:
            if self.dry_run:
                logger.debug(f"[DRY RUN] Would remove: {operation.target_path}")
                return
            os.remove(operation.target_path)

        deleted = self._run_phase(
            self.PHASE_DELETE,
            deletions,
            delete,
            describe=lambda op: op.target_path,
            failure=lambda op, e: (
                f"Remove file error ({op.reason.value}): {op.target_path} - {e}"
            ),
            result=result,
        )
        result.files_deleted += len(deleted)
        return [op.target_path for op in deleted]

    def prune_directories(
        self,
        deleted_targets: Sequence[str],
        destination_root: str,
        result: TaskResult,
        keep: Optional[Set[str]] = None,
    ) -> List[str]:
        """
        Remove directories left without files by the delete phase.

        Every ancestor of a deleted file below ``destination_root`` is a
        candidate. Candidates are visited deepest first and removed with
        everything under them when they no longer contain any file. The root
        itself is never removed, and neither is any path in ``keep`` (copy targets
        that replaced a directory) or below one. Runs sequentially because candidates nest.

        Returns:
            List[str]: Directories removed (or that would be, in dry-run mode).
        """
        keep = keep or set()
        candidates = [
            c for c in self._prune_candidates(deleted_targets, destination_root)
            if c not in keep and keep.isdisjoint(self._parents_below(c, destination_root))
        ]
        ignore: Set[str] = set(deleted_targets) if self.dry_run else set()
        pruned: List[str] = []
        total = len(candidates)

        for completed, directory in enumerate(candidates, start=1):
            try:
                if self._is_prunable(directory, ignore):
                    if self.dry_run:
                        logger.debug(f"[DRY RUN] Would remove empty directory: {directory}")
                    else:
                        shutil.rmtree(directory)
                        logger.debug(f"Removed empty directory: {directory}")
                    pruned.append(directory)
            except OSError as e:
                self._record_failure(f"Remove empty directory error: {directory} - {e}", result)
            self._report(self.PHASE_PRUNE, completed, total, directory)

        result.directories_pruned += len(pruned)
        return pruned

    def _is_prunable(self, directory: str, ignore: Set[str]) -> bool:
        if not os.path.isdir(directory):
            return False
        return not self._scanner.contains_files(directory, ignore=ignore)

    @staticmethod
    def _prune_candidates(deleted_targets: Sequence[str], destination_root: str) -> List[str]:
        candidates: Set[str] = set()
        for target in deleted_targets:
            candidates.update(SyncExecutor._parents_below(target, destination_root))

        # Deepest first so children go before the parents that contain them
        return sorted(candidates, key=lambda d: (-d.count("/"), d))

    @staticmethod
    def _parents_below(path: str, root: str) -> List[str]:
        """Ancestors of ``path`` strictly below ``root``, nearest first."""
        root = root if root.endswith("/") else root + "/"
        parents: List[str] = []
        parent = path[:max(path.rfind("/"), 0)]
        while len(parent) >= len(root) and (parent + "/").startswith(root):
            parents.append(parent)
            parent = parent[:max(parent.rfind("/"), 0)]
        return parents

    def _run_phase(
        self,
        phase: str,
        items: Sequence[T],
        action: Callable[[T], None],
        describe: Callable[[T], str],
        failure: Callable[[T, Exception], str],
        result: TaskResult,
    ) -> List[T]:
        """
        Apply ``action`` to every item and return the items that succeeded.

        Failures are turned into messages by ``failure`` and recorded; progress
        is reported from the calling thread after each item.
        """
        total = len(items)
        succeeded: List[T] = []
        if total == 0:
            return succeeded

        if self.max_workers == 1 or total == 1:
            for completed, item in enumerate(items, start=1):
                error = self._attempt(item, action, failure)
                if error is None:
                    succeeded.append(item)
                else:
                    self._record_failure(error, result)
                self._report(phase, completed, total, describe(item))
            return succeeded

        with ThreadPoolExecutor(max_workers=min(self.max_workers, total)) as pool:
            futures = {pool.submit(self._attempt, item, action, failure): item for item in items}
            for completed, future in enumerate(as_completed(futures), start=1):
                item = futures[future]
                error = future.result()
                if error is None:
                    succeeded.append(item)
                else:
                    self._record_failure(error, result)
                self._report(phase, completed, total, describe(item))

        return succeeded

    @staticmethod
    def _attempt(
        item: T,
        action: Callable[[T], None],
        failure: Callable[[T, Exception], str],
    ) -> Optional[str]:
        """Run ``action`` on one item; return an error message instead of raising."""
        try:
            action(item)
        except (OSError, shutil.Error) as e:
            return failure(item, e)
        return None

    @staticmethod
    def _record_failure(message: str, result: TaskResult) -> None:
        logger.warning(message)
        result.errors.append(message)

    def _report(self, phase: str, completed: int, total: int, path: str) -> None:
        if self.progress_callback is not None:
            self.progress_callback(phase, completed, total, path)
