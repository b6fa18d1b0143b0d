"""Unit tests for treesync data models."""

from pathlib import Path

import pytest

from treesync.models import Operation, OperationReason, SyncPlan, SyncTask


@pytest.mark.unit
class TestSyncTaskFromPaths:
    """Tests for SyncTask.from_paths()."""

    def test_relative_paths_anchor_to_cwd(self, temp_dir: Path, source_dir: Path):
        task = SyncTask.from_paths("a", "missing", cwd=str(temp_dir), environ={})

        base = temp_dir.as_posix()
        assert task.source == f"{base}/a/"
        assert task.destination == f"{base}/missing"

    def test_absolute_paths_ignore_cwd(self, source_dir: Path, destination_dir: Path):
        task = SyncTask.from_paths(
            str(source_dir), str(destination_dir), cwd="/elsewhere", environ={}
        )

        assert task.source == source_dir.as_posix() + "/"
        assert task.destination == destination_dir.as_posix() + "/"

    def test_variables_and_dot_segments(self, temp_dir: Path, source_dir: Path):
        task = SyncTask.from_paths(
            "%ROOT%/./a", "%ROOT%/./b/../c", cwd="/elsewhere", environ={"ROOT": temp_dir.as_posix()}
        )

        assert task.source == temp_dir.as_posix() + "/a/"
        assert task.destination == temp_dir.as_posix() + "/b/../c"


@pytest.mark.unit
class TestOperation:
    """Tests for Operation and OperationReason."""

    @pytest.mark.parametrize("reason,is_copy", [
        (OperationReason.MISSING_IN_DESTINATION, True),
        (OperationReason.SIZE_MISMATCH, True),
        (OperationReason.MISSING_IN_SOURCE, False),
    ])
    def test_reason_routes_phase(self, reason, is_copy):
        operation = Operation("/src/a" if is_copy else "", "/dst/a", reason)

        assert reason.is_copy is is_copy
        assert operation.is_copy is is_copy
        assert operation.is_delete is not is_copy

    def test_key_is_the_full_triple(self):
        copy = Operation("/src/a", "/dst/a", OperationReason.MISSING_IN_DESTINATION)
        recopy = Operation("/src/a", "/dst/a", OperationReason.SIZE_MISMATCH)

        assert copy.key == ("/src/a", "/dst/a", OperationReason.MISSING_IN_DESTINATION)
        assert copy.key != recopy.key

    def test_operations_are_immutable(self):
        operation = Operation("", "/dst/a", OperationReason.MISSING_IN_SOURCE)

        with pytest.raises(AttributeError):
            operation.target_path = "/dst/b"


@pytest.mark.unit
class TestSyncPlan:
    """Tests for SyncPlan.is_empty."""

    def test_empty_without_operations(self):
        task = SyncTask(source="/src/", destination="/dst/")

        assert SyncPlan(task=task, source_file_count=4, destination_file_count=4).is_empty

    def test_not_empty_with_deletion_only(self):
        task = SyncTask(source="/src/", destination="/dst/")
        plan = SyncPlan(
            task=task,
            deletions=[Operation("", "/dst/x", OperationReason.MISSING_IN_SOURCE)],
        )

        assert not plan.is_empty
