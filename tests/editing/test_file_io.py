"""Tests for the local file-system collaborator."""

import os

from change_review.editing.file_io import LocalFileSystem


class TestLocalFileSystem:
    def test_missing_file_reads_empty(self, tmp_path):
        fs = LocalFileSystem(str(tmp_path))
        assert fs.read_text("nope.txt") == ""

    def test_write_then_read(self, tmp_path):
        fs = LocalFileSystem(str(tmp_path))
        fs.write_text("pkg/mod.py", "x = 1\n")

        assert (tmp_path / "pkg" / "mod.py").read_text() == "x = 1\n"
        assert fs.read_text("pkg/mod.py") == "x = 1\n"

    def test_overwrite_leaves_no_temp_file(self, tmp_path):
        fs = LocalFileSystem(str(tmp_path))
        fs.write_text("a.txt", "one\n")
        fs.write_text("a.txt", "two\n")

        assert os.listdir(tmp_path) == ["a.txt"]
        assert fs.read_text("a.txt") == "two\n"

    def test_crlf_preserved(self, tmp_path):
        (tmp_path / "win.txt").write_bytes(b"a\r\nb\r\n")
        fs = LocalFileSystem(str(tmp_path))

        assert fs.read_text("win.txt") == "a\r\nb\r\n"
        fs.write_text("win.txt", "a\r\nc\r\n")
        assert (tmp_path / "win.txt").read_bytes() == b"a\r\nc\r\n"

    def test_delete(self, tmp_path):
        (tmp_path / "old.txt").write_text("bye\n")
        fs = LocalFileSystem(str(tmp_path))

        fs.delete("old.txt")
        fs.delete("old.txt")

        assert not (tmp_path / "old.txt").exists()

    def test_resolve_absolute(self, tmp_path):
        fs = LocalFileSystem(str(tmp_path))
        target = str(tmp_path / "x.py")
        assert fs.resolve("x.py") == target
        assert fs.resolve(target) == target
