"""Plan execution package for treesync.

This package provides the SyncExecutor class for applying a SyncPlan:
directory allocation, file copying, file deletion and empty directory pruning.

Example:
    >>> from treesync.operations import SyncExecutor
    >>> executor = SyncExecutor(max_workers=4)
    >>> result = executor.execute(plan)
    >>> print(f"Copied: {result.files_copied}, Deleted: {result.files_deleted}")
"""

from .sync_executor import SyncExecutor

__all__ = ["SyncExecutor"]
