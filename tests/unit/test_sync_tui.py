"""Unit tests for SyncTUI output."""

from datetime import datetime

import pytest

from treesync.models import (
    Operation,
    OperationReason,
    SyncPlan,
    SyncSummary,
    SyncTask,
    TaskResult,
)
from treesync.ui import SyncTUI


@pytest.fixture
def task() -> SyncTask:
    return SyncTask(source="/data/[raw]/", destination="/backup/")


def output_of(tui: SyncTUI) -> str:
    return tui.console.file.getvalue()


@pytest.mark.unit
class TestTaskOutput:
    """Tests for per-task output."""

    def test_header_shows_paths_verbatim(self, tui_with_captured_output, task):
        tui_with_captured_output.display_task_header(task, dry_run=True)

        output = output_of(tui_with_captured_output)
        assert "/data/[raw]/" in output
        assert "/backup/" in output
        assert "dry run" in output

    def test_notice_shows_brackets_verbatim(self, tui_with_captured_output):
        tui_with_captured_output.display_notice("Destination would be created: /backup/[raw]/")

        assert "/backup/[raw]/" in output_of(tui_with_captured_output)

    def test_empty_plan(self, tui_with_captured_output, task):
        tui_with_captured_output.display_plan(SyncPlan(task=task))
        assert "Already synchronized" in output_of(tui_with_captured_output)

    def test_plan_counts(self, tui_with_captured_output, task):
        plan = SyncPlan(
            task=task,
            copies=[Operation("/data/[raw]/a", "/backup/a", OperationReason.MISSING_IN_DESTINATION)],
            deletions=[
                Operation("", "/backup/x", OperationReason.MISSING_IN_SOURCE),
                Operation("", "/backup/y", OperationReason.MISSING_IN_SOURCE),
            ],
            source_file_count=1,
        )
        tui_with_captured_output.display_plan(plan)

        output = output_of(tui_with_captured_output)
        assert "To copy: 1" in output
        assert "To delete: 2" in output

    def test_task_result_with_errors(self, tui_with_captured_output, task):
        result = TaskResult(
            task=task,
            dry_run=False,
            timestamp=datetime.now(),
            files_copied=3,
            errors=["boom"],
        )
        tui_with_captured_output.display_task_result(result)

        output = output_of(tui_with_captured_output)
        assert "copy 3" in output
        assert "1 item(s) failed" in output

    def test_progress_callback_adds_one_bar_per_phase(self, tui_with_captured_output):
        progress, callback = tui_with_captured_output.create_progress_callback()
        with progress:
            callback("Copy files", 1, 2, "/backup/a")
            callback("Copy files", 2, 2, "/backup/b")
            callback("Remove files", 1, 1, "/backup/[old]")

        tasks = progress.tasks
        assert [t.description for t in tasks] == ["Copy files", "Remove files"]
        assert tasks[0].completed == 2
        assert tasks[0].percentage == 100.0


@pytest.mark.unit
class TestRunSummary:
    """Tests for the run summary."""

    def test_summary_table(self, tui_with_captured_output):
        summary = SyncSummary(total_tasks=2, total_files_copied=1500, duration_seconds=75)
        tui_with_captured_output.display_run_summary(summary)

        output = output_of(tui_with_captured_output)
        assert "Sync Complete" in output
        assert "1,500" in output
        assert "1m 15s" in output

    def test_errors_are_truncated(self, tui_with_captured_output):
        errors = [f"error {i}" for i in range(15)]
        tui_with_captured_output.display_run_summary(SyncSummary(errors=errors))

        output = output_of(tui_with_captured_output)
        assert "Errors (15)" in output
        assert "error 9" in output
        assert "error 10" not in output
        assert "and 5 more errors" in output

    def test_interrupted_title(self, tui_with_captured_output):
        tui_with_captured_output.display_run_summary(SyncSummary(interrupted=True))
        assert "Sync Interrupted" in output_of(tui_with_captured_output)

    def test_wait_for_enter_handles_eof(self, tui_with_captured_output, monkeypatch):
        def raise_eof(*args, **kwargs):
            raise EOFError

        monkeypatch.setattr(tui_with_captured_output.console, "input", raise_eof)
        tui_with_captured_output.wait_for_enter()
