"""
Tests for OperationExecutor: decision priority, per-file error isolation,
write-once actions and the placed-checksum set.
"""
import os
from unittest import mock

import pytest

from chronofile.core.executor import NULL_METADATA_ERROR, NULL_PATH_ERROR, OperationExecutor
from chronofile.core.models import (
    Action, DuplicateIndex, FileOperation, OperationMode, Outcome, RunCounters,
)
from chronofile.core.path_resolver import PathResolverImpl
from chronofile.services.action_handler import FileActionHandler

DATE = "2020-05-01T10:00:00"


@pytest.fixture
def out(tmp_path):
    return tmp_path / "out"


def make_op(path, checksum="c1", date=DATE, content=None):
    if content is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    op = FileOperation.from_path(str(path))
    op.check_sum = checksum
    op.creation_date = date
    return op


def make_executor(out, mode=OperationMode.COPY, destination_index=None, dry_run=False, **kwargs):
    counters = RunCounters()
    executor = OperationExecutor(
        path_resolver=PathResolverImpl(str(out), dry_run=dry_run),
        action_handler=FileActionHandler(dry_run=dry_run),
        counters=counters,
        destination_index=destination_index if destination_index is not None else DuplicateIndex(),
        mode=mode,
        **kwargs,
    )
    return executor, counters


class TestDecisionPriority:
    def test_missing_metadata_is_skipped(self, tmp_path, out):
        no_sum = make_op(tmp_path / "a.jpg", checksum=None, content=b"a")
        no_date = make_op(tmp_path / "b.jpg", date=None, content=b"b")
        executor, counters = make_executor(out)

        executor.execute([no_sum, no_date])

        for op in (no_sum, no_date):
            assert op.action == Action.SKIPPED
            assert op.error == NULL_METADATA_ERROR
            assert op.new_path is None
        assert counters.snapshot().operations_done == 0

    def test_copy_places_file_under_date_folder(self, tmp_path, out):
        op = make_op(tmp_path / "a.jpg", content=b"a")
        executor, counters = make_executor(out)

        executor.execute([op])

        assert op.action == Action.COPIED
        assert op.new_path == str(out / "2020" / "05" / "01" / "a.jpg")
        assert (out / "2020" / "05" / "01" / "a.jpg").read_bytes() == b"a"
        assert counters.snapshot().operations_done == 1
        assert executor.completed == {"c1"}

    def test_second_copy_of_same_content_is_duplicate(self, tmp_path, out):
        first = make_op(tmp_path / "a.jpg", content=b"same")
        second = make_op(tmp_path / "renamed.png", content=b"same")
        executor, _ = make_executor(out)

        executor.execute([first, second])

        assert first.action == Action.COPIED
        assert second.action == Action.SKIPPED_DUPLICATE
        assert second.new_path is None

    def test_duplicate_detection_follows_list_order(self, tmp_path, out):
        a = make_op(tmp_path / "a.jpg", content=b"same")
        b = make_op(tmp_path / "b.jpg", content=b"same")
        executor, _ = make_executor(out)

        executor.execute([b, a])

        assert b.action == Action.COPIED
        assert a.action == Action.SKIPPED_DUPLICATE

    def test_move_with_delete_duplicates_removes_source(self, tmp_path, out):
        first = make_op(tmp_path / "a.jpg", content=b"same")
        second = make_op(tmp_path / "b.jpg", content=b"same")
        executor, counters = make_executor(out, mode=OperationMode.MOVE, delete_duplicates=True)

        executor.execute([first, second])

        assert first.action == Action.MOVED
        assert second.action == Action.DELETED_DUPLICATE
        assert not (tmp_path / "b.jpg").exists()
        assert counters.snapshot().operations_done == 2

    def test_copy_never_deletes_duplicates(self, tmp_path, out):
        first = make_op(tmp_path / "a.jpg", content=b"same")
        second = make_op(tmp_path / "b.jpg", content=b"same")
        executor, _ = make_executor(out, delete_duplicates=True, delete_existing=True)

        executor.execute([first, second])

        assert second.action == Action.SKIPPED_DUPLICATE
        assert (tmp_path / "b.jpg").exists()

    def test_content_already_at_destination_is_skipped(self, tmp_path, out):
        index = DuplicateIndex()
        index.add("c1", str(out / "elsewhere" / "old_name.jpg"))
        op = make_op(tmp_path / "a.jpg", content=b"a")
        executor, counters = make_executor(out, destination_index=index)

        executor.execute([op])

        assert op.action == Action.SKIPPED_EXISTING
        assert counters.snapshot().files_skipped_already_exist == 1
        assert counters.snapshot().operations_done == 0

    def test_move_with_delete_existing_removes_source(self, tmp_path, out):
        index = DuplicateIndex()
        index.add("c1", str(out / "old.jpg"))
        op = make_op(tmp_path / "a.jpg", content=b"a")
        executor, counters = make_executor(out, mode=OperationMode.MOVE, destination_index=index,
                                           delete_existing=True)

        executor.execute([op])

        assert op.action == Action.DELETED_EXISTING
        assert not (tmp_path / "a.jpg").exists()
        assert counters.snapshot().files_skipped_already_exist == 1
        assert counters.snapshot().operations_done == 1

    def test_in_run_duplicate_wins_over_existing(self, tmp_path, out):
        index = DuplicateIndex()
        op1 = make_op(tmp_path / "a.jpg", checksum="c1", content=b"a")
        op2 = make_op(tmp_path / "b.jpg", checksum="c1", content=b"a")
        executor, _ = make_executor(out, destination_index=index)
        executor.execute([op1])
        index.add("c1", op1.new_path)

        executor.execute([op2])
        assert op2.action == Action.SKIPPED_DUPLICATE

    def test_unresolvable_path_is_skipped(self, tmp_path, out):
        op = make_op(tmp_path / "a.jpg", content=b"a")
        executor, _ = make_executor(out)
        executor.path_resolver = mock.Mock()
        executor.path_resolver.resolve.return_value = None

        executor.execute([op])

        assert op.action == Action.SKIPPED
        assert op.error == NULL_PATH_ERROR
        executor.path_resolver.claim.assert_not_called()


class TestErrorIsolation:
    def test_failed_primitive_does_not_stop_the_run(self, tmp_path, out):
        missing = make_op(tmp_path / "missing.jpg", checksum="m")
        good = make_op(tmp_path / "good.jpg", checksum="g", content=b"g")
        executor, counters = make_executor(out)

        executor.execute([missing, good])

        assert missing.action == Action.ERROR
        assert missing.error
        assert good.action == Action.COPIED
        snapshot = counters.snapshot()
        assert snapshot.operations_error_count == 1
        assert snapshot.operations_done == 1

    def test_failed_file_is_not_tracked_as_placed(self, tmp_path, out):
        missing = make_op(tmp_path / "missing.jpg", checksum="same")
        later = make_op(tmp_path / "later.jpg", checksum="same", content=b"x")
        executor, _ = make_executor(out)

        executor.execute([missing, later])

        assert later.action == Action.COPIED


class TestWriteOnce:
    def test_settle_twice_raises(self):
        op = FileOperation.from_path("/src/a.jpg")
        op.settle(Outcome(Action.COPIED))
        with pytest.raises(RuntimeError):
            op.settle(Outcome(Action.ERROR, "late failure"))
        assert op.action == Action.COPIED

    def test_executing_settled_operation_raises(self, tmp_path, out):
        op = make_op(tmp_path / "a.jpg", content=b"a")
        executor, _ = make_executor(out)
        executor.execute([op])
        with pytest.raises(RuntimeError):
            executor.execute([op])


class TestPlacedChecksums:
    def test_moved_files_count_as_placed_by_default(self, tmp_path, out):
        first = make_op(tmp_path / "a.jpg", content=b"same")
        second = make_op(tmp_path / "b.jpg", content=b"same")
        executor, _ = make_executor(out, mode=OperationMode.MOVE)

        executor.execute([first, second])

        assert second.action == Action.SKIPPED_DUPLICATE
        assert (tmp_path / "b.jpg").exists()

    def test_copy_only_tracking_lets_moved_duplicates_through(self, tmp_path, out):
        first = make_op(tmp_path / "a.jpg", content=b"same")
        second = make_op(tmp_path / "b.jpg", content=b"same")
        executor, _ = make_executor(out, mode=OperationMode.MOVE, track_copy_only=True)

        executor.execute([first, second])

        assert first.action == Action.MOVED
        assert second.action == Action.MOVED
        assert executor.completed == set()

    def test_linked_files_count_as_placed(self, tmp_path, out):
        first = make_op(tmp_path / "a.jpg", content=b"same")
        second = make_op(tmp_path / "b.jpg", content=b"same")
        executor, _ = make_executor(out, mode=OperationMode.LINK)

        executor.execute([first, second])

        assert first.action == Action.LINKED
        assert second.action == Action.SKIPPED_DUPLICATE


class TestThrottleAndDryRun:
    def test_copy_throttle_sleeps_after_each_copy(self, tmp_path, out):
        sleep = mock.Mock()
        ops = [make_op(tmp_path / f"{i}.jpg", checksum=str(i), content=bytes([i])) for i in range(3)]
        executor, _ = make_executor(out, copy_throttle=0.05, sleep=sleep)

        executor.execute(ops)

        assert sleep.call_count == 3
        sleep.assert_called_with(0.05)

    def test_dry_run_decides_but_writes_nothing(self, tmp_path, out):
        first = make_op(tmp_path / "x" / "a.jpg", checksum="1", content=b"1")
        second = make_op(tmp_path / "y" / "a.jpg", checksum="2", content=b"2")
        sleep = mock.Mock()
        executor, counters = make_executor(out, dry_run=True, copy_throttle=0.05, sleep=sleep)

        executor.execute([first, second])

        assert first.action == Action.COPIED
        assert second.action == Action.COPIED
        assert first.new_path != second.new_path
        assert os.path.basename(second.new_path) == "a-2.jpg"
        assert not out.exists()
        assert counters.snapshot().operations_done == 2
        sleep.assert_not_called()
