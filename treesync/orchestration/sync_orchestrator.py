"""SyncOrchestrator for sequencing synchronization tasks.

This module provides the SyncOrchestrator class that runs each task through
the scan -> plan -> execute pipeline. It coordinates TreeScanner, DiffEngine,
SyncExecutor, SyncTUI and (optionally) SyncLogger.

Example:
    from treesync.models import SyncTask
    from treesync.orchestration import SyncOrchestrator

    orchestrator = SyncOrchestrator(workers=4)

    # One task
    result = orchestrator.sync(SyncTask.from_paths("photos", "/mnt/backup/photos"))

    # Several tasks, one after another
    summary = orchestrator.run(tasks)
"""

import dataclasses
import logging
import os
import time
from datetime import datetime
from typing import Iterable, List, Optional

from rich.markup import escape

from treesync.exceptions import SourceMissingError
from treesync.models import SyncSummary, SyncTask, TaskResult
from treesync.operations import SyncExecutor
from treesync.orchestration.sync_logger import SyncLogger
from treesync.planning import DiffEngine
from treesync.scanning import PathCanonicalizer, TreeScanner
from treesync.ui import SyncTUI

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Runs synchronization tasks end to end.

    Tasks are processed strictly one after another. Within a task the phases
    run in a fixed order: scan both trees, plan, allocate directories, copy,
    delete, prune. The only fatal condition is a missing source directory,
    which raises SourceMissingError and aborts the run.

    Attributes:
        workers: Thread pool size used by the executor for each phase.
        dry_run: Whether to plan and report without changing anything.
        verbose: Whether to display scanner warnings and log locations.
        logger_instance: Optional SyncLogger that receives the run record.
            The caller owns its lifecycle (it must already be opened).
    """

    def __init__(
        self,
        tui: Optional[SyncTUI] = None,
        workers: int = SyncExecutor.DEFAULT_WORKERS,
        dry_run: bool = False,
        verbose: bool = False,
        logger_instance: Optional[SyncLogger] = None,
    ) -> None:
        """Initialize the SyncOrchestrator.

        Raises:
            ValueError: If workers is less than 1.
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")

        self.workers = workers
        self.dry_run = dry_run
        self.verbose = verbose
        self.logger_instance = logger_instance

        self._tui = tui or SyncTUI()
        self._canonicalizer = PathCanonicalizer()
        self._scanner = TreeScanner(self._canonicalizer)
        self._diff_engine = DiffEngine()

    def run(self, tasks: Iterable[SyncTask]) -> SyncSummary:
        """Synchronize every task in order and summarize the run.

        Elapsed wall-clock time is measured across all tasks.

        Returns:
            SyncSummary with totals over all completed tasks.

        Raises:
            SourceMissingError: If any task's source directory is missing. No
                later task is started.
        """
        start_time = time.time()
        results: List[TaskResult] = []
        interrupted = False

        if self.logger_instance is not None:
            self.logger_instance.log_header()

        try:
            for task in tasks:
                results.append(self.sync(task))
        except KeyboardInterrupt:
            interrupted = True
            self._tui.display_notice("Sync interrupted by user.")

        summary = self._aggregate_summary(results, time.time() - start_time)
        summary.interrupted = interrupted

        self._tui.display_run_summary(summary, self.dry_run)
        if self.logger_instance is not None:
            self.logger_instance.log_summary(summary)
            if self.verbose:
                self._tui.console.print(
                    f"[dim]Log file: {escape(str(self.logger_instance.get_log_path()))}[/dim]"
                )

        return summary

    def sync(self, task: SyncTask) -> TaskResult:
        """Synchronize a single task.

        Both roots are re-canonicalized first, so the returned result carries
        ``/``-terminated paths for existing directories. A missing destination
        is created; in dry-run mode it is treated as empty instead.

        Returns:
            TaskResult with counts and per-item errors.

        Raises:
            SourceMissingError: If the source directory does not exist.
        """
        start_time = time.time()

        if not os.path.isdir(task.source):
            raise SourceMissingError(task.source)
        # Relative paths are literal prefix cuts, so both roots need their "/"
        task = dataclasses.replace(
            task,
            source=self._canonicalizer.canonicalize(task.source, expand_variables=False),
            destination=self._canonicalizer.canonicalize(
                task.destination, expand_variables=False
            ),
        )

        destination_exists = self._prepare_destination(task)

        self._tui.display_task_header(task, self.dry_run)
        if self.logger_instance is not None:
            self.logger_instance.log_task(task)

        self._scanner.clear_errors()
        source_files = self._scanner.scan_files(task.source)
        destination_files = (
            self._scanner.scan_files(task.destination) if destination_exists else set()
        )
        scan_errors = self._scanner.get_errors()

        plan = self._diff_engine.plan(task, source_files, destination_files)
        logger.debug(
            f"Planned {task.source} -> {task.destination}: "
            f"{len(plan.copies)} copies, {len(plan.deletions)} deletions, "
            f"{len(plan.directories)} directories"
        )

        self._tui.display_plan(plan)
        if self.logger_instance is not None:
            self.logger_instance.log_plan(plan)

        if plan.is_empty:
            result = TaskResult(
                task=task,
                dry_run=self.dry_run,
                timestamp=datetime.now(),
                already_synchronized=True,
            )
        else:
            progress, callback = self._tui.create_progress_callback()
            executor = SyncExecutor(
                max_workers=self.workers,
                progress_callback=callback,
                dry_run=self.dry_run,
                scanner=self._scanner,
            )
            with progress:
                result = executor.execute(plan)

        result.errors = scan_errors + result.errors
        result.duration_seconds = time.time() - start_time

        if self.verbose and scan_errors:
            self._tui.console.print("[yellow]Scanner warnings:[/yellow]")
            for error in scan_errors:
                self._tui.console.print(f"  [dim]- {escape(error)}[/dim]")

        self._tui.display_task_result(result)
        if self.logger_instance is not None:
            self.logger_instance.log_task_result(result)

        return result

    def _prepare_destination(self, task: SyncTask) -> bool:
        """Create a missing destination; return whether it exists afterwards."""
        if os.path.exists(task.destination):
            return True

        if self.dry_run:
            if not task.destination.endswith("/"):
                task.destination += "/"
            self._tui.display_notice(f"Destination would be created: {task.destination}")
            return False

        os.makedirs(task.destination, exist_ok=True)
        task.destination = self._canonicalizer.canonicalize(
            task.destination, expand_variables=False
        )
        logger.info(f"Created destination directory: {task.destination}")
        return True

    def _aggregate_summary(self, results: List[TaskResult], duration: float) -> SyncSummary:
        """Aggregate statistics across all task results."""
        errors: List[str] = []
        for result in results:
            errors.extend(result.errors)

        return SyncSummary(
            total_tasks=len(results),
            total_files_copied=sum(r.files_copied for r in results),
            total_files_deleted=sum(r.files_deleted for r in results),
            total_directories_created=sum(r.directories_created for r in results),
            total_directories_pruned=sum(r.directories_pruned for r in results),
            errors=errors,
            duration_seconds=duration,
        )
