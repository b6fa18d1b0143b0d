"""SyncLogger for recording synchronization runs in a structured text file.

This module provides the SyncLogger class that writes a header, one section
per task (plan and results) and a run summary.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from treesync.models import SyncPlan, SyncSummary, SyncTask, TaskResult


class SyncLogger:
    """Logger for synchronization runs with structured output format.

    Usage:
        with SyncLogger(dry_run=True) as logger:
            logger.log_header()
            for task in tasks:
                logger.log_task(task)
                logger.log_plan(plan)
                logger.log_task_result(result)
            logger.log_summary(summary)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(
        self,
        log_file_path: Optional[Path] = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the SyncLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            dry_run: Whether this is a dry run (no actual changes made).

        Raises:
            OSError: If the log file path is not writable.
        """
        self._dry_run = dry_run
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None
        self._task_counter = 0

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"sync_log_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file path is writable.

        Raises:
            OSError: If the parent directory doesn't exist or is not writable.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")
        try:
            test_file = parent / f".treesync_test_{id(self)}"
            test_file.touch()
            test_file.unlink()
        except PermissionError:
            raise OSError(f"Permission denied: cannot write to {parent}")

    def __enter__(self) -> "SyncLogger":
        """Open the log file for writing.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the log file; safe to call more than once."""
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp and mode (LIVE SYNC or DRY RUN)."""
        self._write_separator()
        self._write_line("treesync - Sync Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        mode = "DRY RUN" if self._dry_run else "LIVE SYNC"
        self._write_line(f"Mode: {mode}")
        self._write_line("")

    def log_task(self, task: SyncTask) -> None:
        """Start a new task section."""
        self._task_counter += 1
        self._write_separator()
        self._write_line(f"TASK {self._task_counter}")
        self._write_separator()
        self._write_line(f"[{self._format_timestamp(datetime.now())}] Starting sync")
        self._write_line(f"From: {task.source}", indent=2)
        self._write_line(f"To:   {task.destination}", indent=2)

    def log_plan(self, plan: SyncPlan) -> None:
        """Write file counts and every planned operation with its reason."""
        self._write_line(f"Source files: {plan.source_file_count:,}", indent=2)
        self._write_line(f"Destination files: {plan.destination_file_count:,}", indent=2)

        if plan.is_empty:
            self._write_line("Already synchronized", indent=2)
            return

        self._write_line(f"Directories to create: {len(plan.directories)}", indent=2)
        for directory in plan.directories:
            self._write_line(f"+ {directory}", indent=4)

        self._write_line(f"Files to copy: {len(plan.copies)}", indent=2)
        for operation in plan.copies:
            self._write_line(f"> {operation.target_path} ({operation.reason.value})", indent=4)

        self._write_line(f"Files to delete: {len(plan.deletions)}", indent=2)
        for operation in plan.deletions:
            self._write_line(f"- {operation.target_path} ({operation.reason.value})", indent=4)

    def log_task_result(self, result: TaskResult) -> None:
        """Write the statistics and errors of a finished task."""
        if not result.already_synchronized:
            self._write_line("Results:", indent=2)
            self._write_line(f"Directories created: {result.directories_created}", indent=4)
            self._write_line(f"Files copied: {result.files_copied}", indent=4)
            self._write_line(f"Files deleted: {result.files_deleted}", indent=4)
            self._write_line(f"Empty directories removed: {result.directories_pruned}", indent=4)

        if result.errors:
            self._write_line("Errors:", indent=2)
            for error in result.errors:
                self._write_line(f"- {error}", indent=4)

        self._write_line(f"[{self._format_timestamp(datetime.now())}] Completed sync")
        self._write_line("")

    def log_summary(self, summary: SyncSummary) -> None:
        """Write the summary section."""
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Total tasks: {summary.total_tasks}")
        self._write_line(f"Files copied: {summary.total_files_copied:,}")
        self._write_line(f"Files deleted: {summary.total_files_deleted:,}")
        self._write_line(f"Directories created: {summary.total_directories_created}")
        self._write_line(f"Empty directories removed: {summary.total_directories_pruned}")

        if summary.errors:
            self._write_line(f"Total errors: {len(summary.errors)}")
            self._write_line("Errors:")
            for error in summary.errors:
                self._write_line(f"  - {error}")

        if summary.interrupted:
            self._write_line("Run interrupted by user")

        self._write_line(f"Duration: {self._format_duration(summary.duration_seconds)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _format_duration(self, seconds: float) -> str:
        """Format duration in human-readable format.

        Returns:
            Formatted string like "5m 23s", "1h 5m 30s", or "45s".
        """
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation."""
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
