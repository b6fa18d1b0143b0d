"""
treesync - CLI Interface.

A command-line interface for mirroring a source directory tree onto a
destination directory tree. Files missing from the destination are copied,
files whose size differs are re-copied, files missing from the source are
deleted and directories left empty are pruned.

Usage Examples:
    # Mirror one directory onto another
    treesync sync ./photos /mnt/backup/photos

    # Preview what would change
    treesync sync ./photos /mnt/backup/photos --dry-run

    # Run every task listed in ./syncConfig.json
    treesync run

    # Same as `treesync run`
    treesync

    # Use another task list, keep a log and wait for Enter at the end
    treesync run --tasks-file ~/sync-tasks.json --log-file sync.log --pause
"""

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Callable, List, Optional

import typer
from rich.console import Console

from treesync import __version__
from treesync.exceptions import TreeSyncError
from treesync.models import SyncTask
from treesync.operations import SyncExecutor
from treesync.orchestration import SyncLogger, SyncOrchestrator, TaskListLoader
from treesync.ui import SyncTUI

# Exit code for unexpected filesystem errors outside per-item handling
EXIT_OS_ERROR = 4
EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="treesync",
    help="Mirror a source directory tree onto a destination directory tree.",
    add_completion=False,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"treesync v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route treesync's module loggers to stderr."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("treesync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


def open_log_file(
    log_file: Optional[Path], dry_run: bool, stack: ExitStack
) -> Optional[SyncLogger]:
    """Create and open a SyncLogger; a failure only costs the log file."""
    if log_file is None:
        return None
    try:
        return stack.enter_context(SyncLogger(log_file, dry_run=dry_run))
    except OSError as e:
        console.print(
            f"[yellow]Warning:[/yellow] Failed to create log file: {e}. "
            "Continuing without logging."
        )
        return None


def execute_tasks(
    load_tasks: Callable[[], List[SyncTask]],
    workers: int,
    dry_run: bool,
    log_file: Optional[Path],
    verbose: bool,
    pause: bool,
) -> None:
    """
    Load tasks, run them and translate fatal errors into exit codes.

    Per-item failures never change the exit code; the run still completes.

    Raises:
        typer.Exit: With the error's exit code for fatal errors, 130 when
            interrupted.
    """
    configure_logging(verbose)
    tui = SyncTUI(console=console)

    try:
        with ExitStack() as stack:
            logger_instance = open_log_file(log_file, dry_run, stack)
            tasks = load_tasks()

            if dry_run:
                console.print("[yellow][DRY RUN MODE][/yellow] No files will be modified.\n")

            orchestrator = SyncOrchestrator(
                tui=tui,
                workers=workers,
                dry_run=dry_run,
                verbose=verbose,
                logger_instance=logger_instance,
            )
            summary = orchestrator.run(tasks)

            if summary.errors:
                console.print(
                    f"\n[yellow]Completed with {len(summary.errors)} error(s).[/yellow]"
                )
            if log_file and logger_instance:
                console.print(f"[dim]Log written to: {logger_instance.get_log_path()}[/dim]")

            if summary.interrupted:
                raise typer.Exit(EXIT_INTERRUPTED)

    except TreeSyncError as e:
        tui.display_error(str(e))
        raise typer.Exit(e.exit_code)

    except KeyboardInterrupt:
        console.print("\n[yellow]Sync interrupted by user.[/yellow]")
        raise typer.Exit(EXIT_INTERRUPTED)

    except OSError as e:
        tui.display_error(str(e))
        raise typer.Exit(EXIT_OS_ERROR)

    finally:
        if pause:
            tui.wait_for_enter()


def run_task_list(
    tasks_file: Optional[Path] = None,
    workers: int = SyncExecutor.DEFAULT_WORKERS,
    dry_run: bool = False,
    log_file: Optional[Path] = None,
    verbose: bool = False,
    pause: bool = False,
) -> None:
    """Run every task of the JSON task list."""
    loader = TaskListLoader()

    def load_tasks() -> List[SyncTask]:
        try:
            return loader.load(tasks_file)
        finally:
            if loader.template_written:
                console.print(
                    f"[yellow]Task list not found. A template was written to "
                    f"{loader.task_file}; edit it and run again.[/yellow]"
                )

    execute_tasks(load_tasks, workers, dry_run, log_file, verbose, pause)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Mirror a source directory tree onto a destination directory tree.

    Without a command, runs the task list in ./syncConfig.json.
    """
    if ctx.invoked_subcommand is None:
        run_task_list()


@app.command()
def sync(
    source: str = typer.Argument(
        ...,
        help="Source directory; must exist.",
    ),
    destination: str = typer.Argument(
        ...,
        help="Destination directory; created if missing.",
    ),
    workers: int = typer.Option(
        SyncExecutor.DEFAULT_WORKERS,
        "--workers",
        "-w",
        min=1,
        help="Parallel file operations per phase.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would change without touching the filesystem.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
    pause: bool = typer.Option(
        False,
        "--pause",
        help="Wait for Enter before exiting.",
    ),
) -> None:
    """
    Mirror SOURCE onto DESTINATION.

    Files are matched by relative path and compared by size only.
    """
    execute_tasks(
        lambda: [SyncTask.from_paths(source, destination)],
        workers,
        dry_run,
        log_file,
        verbose,
        pause,
    )


@app.command()
def run(
    tasks_file: Optional[Path] = typer.Option(
        None,
        "--tasks-file",
        "-t",
        help="JSON task list (default: ./syncConfig.json).",
    ),
    workers: int = typer.Option(
        SyncExecutor.DEFAULT_WORKERS,
        "--workers",
        "-w",
        min=1,
        help="Parallel file operations per phase.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would change without touching the filesystem.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
    pause: bool = typer.Option(
        False,
        "--pause",
        help="Wait for Enter before exiting.",
    ),
) -> None:
    """
    Run every task in the task list, one after another.

    A missing task list is replaced by a template to edit.
    """
    run_task_list(tasks_file, workers, dry_run, log_file, verbose, pause)


if __name__ == "__main__":
    app()
