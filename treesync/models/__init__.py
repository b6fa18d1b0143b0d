"""
Models package for treesync.

This package provides convenient imports for all data models:
- OperationReason: Enum for why an operation was planned
- SyncTask: Source/destination pairing
- Operation: Planned copy or delete action
- SyncPlan: Classified work for one task
- TaskResult: Results of one executed task
- SyncSummary: Whole-run summary
"""

from .operation_reason import OperationReason
from .data_models import (
    Operation,
    SyncPlan,
    SyncSummary,
    SyncTask,
    TaskResult,
)

__all__ = [
    "OperationReason",
    "Operation",
    "SyncPlan",
    "SyncSummary",
    "SyncTask",
    "TaskResult",
]
