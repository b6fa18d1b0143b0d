"""Workflow orchestration package for treesync.

This package contains orchestration components for synchronization runs:
- SyncLogger: Structured logging of a run to a timestamped log file.
- SyncOrchestrator: Sequences tasks through scan, plan and execution.
- TaskListLoader: Reads the JSON task list.
"""

from treesync.orchestration.sync_logger import SyncLogger
from treesync.orchestration.sync_orchestrator import SyncOrchestrator
from treesync.orchestration.task_list import TaskListLoader

__all__ = ["SyncLogger", "SyncOrchestrator", "TaskListLoader"]
