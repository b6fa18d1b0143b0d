"""treesync - Directory Tree Mirroring Tool.

A Python application that keeps a destination directory tree identical to a
source tree by relative path and file size.
"""

__version__ = "0.1.0"

from .models import (
    Operation,
    OperationReason,
    SyncPlan,
    SyncSummary,
    SyncTask,
    TaskResult,
)

__all__ = [
    "__version__",
    "Operation",
    "OperationReason",
    "SyncPlan",
    "SyncSummary",
    "SyncTask",
    "TaskResult",
]


def main() -> None:
    """Entry point for the treesync CLI application.

    Imports and runs the Typer app from the treesync.cli module.
    """
    from treesync.cli import app
    app()
