"""Terminal output for treesync runs.

This module provides the SyncTUI class, a Rich-based console front end for
task headers, plan overviews, per-phase progress bars and run summaries.

Example:
    from treesync.ui import SyncTUI

    tui = SyncTUI()
    tui.display_task_header(task, dry_run=False)
    tui.display_plan(plan)
    progress, callback = tui.create_progress_callback()
    with progress:
        result = SyncExecutor(progress_callback=callback).execute(plan)
    tui.display_run_summary(summary, dry_run=False)
"""

from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
)
from rich.table import Table

from treesync.models import SyncPlan, SyncSummary, SyncTask, TaskResult


class SyncTUI:
    """Rich-based console output for synchronization runs.

    Args:
        console: Optional Rich Console instance for output. If None, creates
            a new Console. Pass a custom Console for testing (e.g., with
            StringIO file for output capture).

    Attributes:
        console: The Rich Console instance used for all output.
    """

    MAX_DISPLAYED_ERRORS = 10

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_task_header(self, task: SyncTask, dry_run: bool = False) -> None:
        """Show which source is synchronized onto which destination."""
        header_text = f"From: {escape(task.source)}\nTo:   {escape(task.destination)}"
        title = "Sync [yellow](dry run)[/yellow]" if dry_run else "Sync"
        self.console.print(Panel(header_text, title=title, border_style="blue"))

    def display_plan(self, plan: SyncPlan) -> None:
        """Show the counts produced by the diff engine."""
        if plan.is_empty:
            self.console.print("[green]Already synchronized.[/green]")
            return

        self.console.print(
            f"Source files: {plan.source_file_count:,}  "
            f"To copy: [cyan]{len(plan.copies):,}[/cyan]  "
            f"To delete: [magenta]{len(plan.deletions):,}[/magenta]  "
            f"Directories to create: {len(plan.directories):,}"
        )

    def create_progress_callback(
        self,
    ) -> tuple[Progress, Callable[[str, int, int, str], None]]:
        """Create a progress display and the callback that feeds it.

        One bar is added per phase the first time the phase reports. Each
        update shows the phase percentage and the path just processed.

        Returns:
            tuple[Progress, Callable[[str, int, int, str], None]]: A tuple containing:
                - Progress: Rich Progress instance that MUST be used as a context
                  manager (with statement) to render and clean up the bars.
                - callback: A function taking (phase, completed, total, path),
                  suitable as SyncExecutor's progress_callback.

        Example:
            progress, callback = tui.create_progress_callback()
            with progress:
                executor = SyncExecutor(progress_callback=callback)
                executor.execute(plan)
        """
        progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("[dim]{task.fields[path]}[/dim]"),
            console=self.console,
        )
        phase_tasks: Dict[str, TaskID] = {}

        def callback(phase: str, completed: int, total: int, path: str) -> None:
            if phase not in phase_tasks:
                phase_tasks[phase] = progress.add_task(phase, total=total, path="")
            progress.update(
                phase_tasks[phase],
                completed=completed,
                path=escape(self._truncate_path(path)),
            )

        return progress, callback

    def display_task_result(self, result: TaskResult) -> None:
        """Show the outcome of a single task."""
        if result.already_synchronized:
            return

        verb = "Would" if result.dry_run else "Done:"
        self.console.print(
            f"{verb} copy {result.files_copied:,}, delete {result.files_deleted:,}, "
            f"create {result.directories_created:,} and prune "
            f"{result.directories_pruned:,} directories "
            f"in {self._format_duration(result.duration_seconds)}"
        )
        if result.errors:
            self.console.print(f"[yellow]{len(result.errors)} item(s) failed.[/yellow]")

    def display_run_summary(self, summary: SyncSummary, dry_run: bool = False) -> None:
        """Display the statistics of a whole run."""
        title = "Sync Complete (Dry Run)" if dry_run else "Sync Complete"
        if summary.interrupted:
            title = "Sync Interrupted"
        border = "yellow" if summary.errors or summary.interrupted else "green"
        self.console.print(Panel(f"Tasks: {summary.total_tasks}", title=title, border_style=border))

        table = Table(show_header=False, box=None)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("Files copied", f"{summary.total_files_copied:,}")
        table.add_row("Files deleted", f"{summary.total_files_deleted:,}")
        table.add_row("Directories created", f"{summary.total_directories_created:,}")
        table.add_row("Directories pruned", f"{summary.total_directories_pruned:,}")
        table.add_row("Errors", str(len(summary.errors)))
        table.add_row("Elapsed", self._format_duration(summary.duration_seconds))

        self.console.print(table)

        if summary.errors:
            self._display_errors(summary.errors)

    def display_error(self, message: str) -> None:
        self.console.print(f"[red]Error:[/red] {escape(message)}")

    def display_notice(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def wait_for_enter(self) -> None:
        """Block until the user presses Enter."""
        try:
            self.console.input("Press enter to exit...")
        except EOFError:
            pass

    def _display_errors(self, errors: List[str]) -> None:
        """Display error messages in a separate panel.

        Args:
            errors: List of error messages to display.
        """
        displayed_errors = errors[:self.MAX_DISPLAYED_ERRORS]
        remaining = len(errors) - self.MAX_DISPLAYED_ERRORS

        error_text = "\n".join(f"- {escape(e)}" for e in displayed_errors)
        if remaining > 0:
            error_text += f"\n\n... and {remaining} more errors"

        error_panel = Panel(
            error_text,
            title=f"Errors ({len(errors)})",
            border_style="red",
        )
        self.console.print(error_panel)

    def _format_duration(self, seconds: float) -> str:
        """Convert seconds to a short human-readable duration.

        Returns:
            Formatted duration string (e.g., "0.42s", "5m 23s").
        """
        if seconds < 0:
            seconds = 0
        if seconds < 60:
            return f"{seconds:.2f}s"
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"

    def _truncate_path(self, path: str, max_length: int = 50) -> str:
        """Keep the tail of long paths, which carries the file name."""
        if len(path) > max_length:
            return "..." + path[-(max_length - 3):]
        return path
