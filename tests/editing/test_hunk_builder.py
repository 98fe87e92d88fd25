"""Tests for hunk grouping."""

import pytest

from change_review.editing.hunk_builder import Hunk, LineChange, build_hunks
from change_review.editing.line_differ import diff_lines, split_lines


def _hunks(original: str, modified: str, context_lines: int = 3):
    ops = diff_lines(split_lines(original), split_lines(modified))
    return build_hunks(ops, context_lines=context_lines)


def _numbered(n: int) -> list[str]:
    return [f"l{i}\n" for i in range(1, n + 1)]


class TestBuildHunks:
    def test_scenario_single_hunk(self):
        hunks = _hunks("a\nb\nc\n", "a\nB\nc\nd\n")

        assert len(hunks) == 1
        hunk = hunks[0]
        assert (hunk.old_start, hunk.old_lines) == (1, 3)
        assert (hunk.new_start, hunk.new_lines) == (1, 4)
        assert hunk.additions == 2
        assert hunk.deletions == 1
        assert [(c.type, c.content) for c in hunk.changes] == [
            ("context", "a"), ("delete", "b"), ("add", "B"),
            ("context", "c"), ("add", "d"),
        ]

    def test_line_numbers(self):
        hunk = _hunks("a\nb\nc\n", "a\nB\nc\nd\n")[0]
        deleted = hunk.changes[1]
        added = hunk.changes[2]
        assert (deleted.old_line_number, deleted.new_line_number) == (2, None)
        assert (added.old_line_number, added.new_line_number) == (None, 2)
        assert hunk.changes[4].new_line_number == 4

    def test_identical_content_has_no_hunks(self):
        assert _hunks("a\nb\n", "a\nb\n") == []

    def test_distant_changes_split(self):
        original = _numbered(20)
        modified = list(original)
        modified[1] = "X\n"
        modified[17] = "Y\n"

        hunks = _hunks("".join(original), "".join(modified))

        assert len(hunks) == 2
        first, second = hunks
        assert (first.old_start, first.old_lines) == (1, 5)
        assert (first.new_start, first.new_lines) == (1, 5)
        assert (second.old_start, second.old_lines) == (15, 6)
        assert (second.new_start, second.new_lines) == (15, 6)

    def test_close_changes_merge(self):
        original = _numbered(20)
        modified = list(original)
        modified[1] = "X\n"
        modified[7] = "Y\n"

        hunks = _hunks("".join(original), "".join(modified))

        assert len(hunks) == 1
        assert hunks[0].additions == 2
        assert hunks[0].deletions == 2

    def test_hunks_are_ordered_and_disjoint(self):
        original = _numbered(40)
        modified = list(original)
        for i in (2, 15, 30):
            modified[i] = "changed\n"

        hunks = _hunks("".join(original), "".join(modified))

        assert len(hunks) == 3
        for prev, nxt in zip(hunks, hunks[1:]):
            assert prev.old_start + prev.old_lines <= nxt.old_start
            assert prev.new_start + prev.new_lines <= nxt.new_start

    def test_zero_context_insertion_header(self):
        hunks = _hunks("a\nb\n", "a\nX\nb\n", context_lines=0)

        assert len(hunks) == 1
        hunk = hunks[0]
        assert (hunk.old_start, hunk.old_lines) == (1, 0)
        assert (hunk.new_start, hunk.new_lines) == (2, 1)
        assert hunk.header == "@@ -1,0 +2,1 @@"

    def test_new_file(self):
        hunk = _hunks("", "a\nb\n")[0]
        assert (hunk.old_start, hunk.old_lines) == (0, 0)
        assert (hunk.new_start, hunk.new_lines) == (1, 2)

    def test_negative_context_rejected(self):
        with pytest.raises(ValueError):
            build_hunks([], context_lines=-1)

    def test_missing_final_newline_kept_in_eol(self):
        hunk = _hunks("a\nb", "a\nc")[0]
        assert hunk.changes[-1].content == "c"
        assert hunk.changes[-1].eol == ""
        assert hunk.changes[0].line == "a\n"


class TestHunkStaging:
    def test_flags_are_exclusive(self):
        hunk = Hunk(1, 1, 1, 1, [LineChange("delete", "x", 1, None, "\n")])
        hunk.accept()
        assert hunk.accepted and not hunk.rejected
        hunk.reject()
        assert hunk.rejected and not hunk.accepted
        assert hunk.decided


class TestChangedSpan:
    def test_replacement_span(self):
        original = _numbered(12)
        modified = original[:4] + [f"new{i}\n" for i in range(5, 9)] + original[8:]

        hunk = _hunks("".join(original), "".join(modified))[0]

        assert hunk.changed_span() == (5, 8)

    def test_replacement_pairs_additions_with_deletions(self):
        hunk = _hunks("a\nb\nc\n", "a\nB\nc\nd\n")[0]
        anchors = [(a, c.type, c.content) for a, c in hunk.anchored_changes()]
        assert anchors == [
            (1, "context", "a"), (2, "delete", "b"), (2, "add", "B"),
            (3, "context", "c"), (3, "add", "d"),
        ]
        assert hunk.changed_span() == (2, 3)

    def test_insertion_at_top_anchors_to_first_line(self):
        hunk = _hunks("a\nb\n", "X\na\nb\n")[0]
        assert hunk.changed_span() == (1, 1)
