"""Fatal error taxonomy for treesync.

Only these errors stop a run. Per-item failures during execution are caught
by the executor and never raised. Each class carries the process exit code
the CLI reports for it; the values are stable for scripting callers.
"""


class TreeSyncError(Exception):
    """Base class for errors that abort a treesync run."""

    exit_code = 1


class SourceMissingError(TreeSyncError):
    """The source directory of a task does not exist."""

    exit_code = 1

    def __init__(self, source: str) -> None:
        super().__init__(f"Source directory does not exist: {source}")
        self.source = source


class TaskListError(TreeSyncError):
    """The task list could not be used."""

    exit_code = 2

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class TaskListMalformedError(TaskListError):
    """The task list is not a JSON list of source/destination entries."""

    exit_code = 2


class TaskListEmptyError(TaskListError):
    """The task list contains no tasks."""

    exit_code = 3
