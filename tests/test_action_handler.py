"""
Tests for FileActionHandler primitives (move, copy, link, delete) and dry run.
"""
import os
from unittest import mock

import pytest

from chronofile.services.action_handler import FileActionHandler, LINK_TMP_SUFFIX


@pytest.fixture
def src(tmp_path):
    path = tmp_path / "src" / "a.jpg"
    path.parent.mkdir()
    path.write_bytes(b"payload")
    return path


class TestPrimitives:
    def test_copy_creates_parent_and_keeps_source(self, tmp_path, src):
        dst = tmp_path / "out" / "2020" / "a.jpg"
        FileActionHandler().copy(str(src), str(dst))
        assert dst.read_bytes() == b"payload"
        assert src.exists()

    def test_move_removes_source(self, tmp_path, src):
        dst = tmp_path / "out" / "a.jpg"
        FileActionHandler().move(str(src), str(dst))
        assert dst.read_bytes() == b"payload"
        assert not src.exists()

    def test_link_shares_inode(self, tmp_path, src):
        dst = tmp_path / "out" / "a.jpg"
        FileActionHandler().link(str(src), str(dst))
        assert os.stat(dst).st_ino == os.stat(src).st_ino

    def test_link_replaces_existing_target(self, tmp_path, src):
        dst = tmp_path / "out" / "a.jpg"
        dst.parent.mkdir()
        dst.write_bytes(b"old")

        FileActionHandler().link(str(src), str(dst))

        assert dst.read_bytes() == b"payload"
        assert os.stat(dst).st_ino == os.stat(src).st_ino
        assert not (dst.parent / ("a.jpg" + LINK_TMP_SUFFIX)).exists()

    def test_delete_removes_file(self, src):
        FileActionHandler().delete(str(src))
        assert not src.exists()

    def test_copy_of_missing_source_raises(self, tmp_path):
        with pytest.raises(OSError):
            FileActionHandler().copy(str(tmp_path / "missing"), str(tmp_path / "out" / "x"))


class TestDryRun:
    def test_no_primitive_touches_the_filesystem(self, tmp_path, src):
        handler = FileActionHandler(dry_run=True)
        out = tmp_path / "out" / "a.jpg"

        handler.copy(str(src), str(out))
        handler.move(str(src), str(out))
        handler.link(str(src), str(out))
        handler.delete(str(src))

        assert src.read_bytes() == b"payload"
        assert not (tmp_path / "out").exists()


class TestTrash:
    def test_delete_uses_send2trash(self, src):
        with mock.patch("chronofile.services.action_handler.send2trash") as trash:
            FileActionHandler(use_trash=True).delete(str(src))
        trash.assert_called_once_with(str(src))

    def test_missing_file_raises_file_not_found(self, tmp_path):
        with mock.patch("chronofile.services.action_handler.send2trash") as trash:
            with pytest.raises(FileNotFoundError):
                FileActionHandler(use_trash=True).delete(str(tmp_path / "missing"))
        trash.assert_not_called()

    def test_trash_failure_is_wrapped(self, src):
        with mock.patch("chronofile.services.action_handler.send2trash", side_effect=OSError("no trash")):
            with pytest.raises(RuntimeError, match="Failed to move to trash"):
                FileActionHandler(use_trash=True).delete(str(src))
