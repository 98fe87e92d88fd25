"""Tests for content materialization from staged hunks."""

import pytest

from change_review.editing.hunk_builder import build_hunks
from change_review.editing.line_differ import diff_lines, split_lines
from change_review.editing.materializer import materialize


def _hunks(original: str, modified: str, context_lines: int = 3):
    ops = diff_lines(split_lines(original), split_lines(modified))
    return build_hunks(ops, context_lines=context_lines)


ORIGINAL = "".join(f"l{i}\n" for i in range(1, 21))
MODIFIED = ORIGINAL.replace("l2\n", "X\n").replace("l18\n", "Y\n")


CASES = [
    ("a\nb\nc\n", "a\nB\nc\nd\n"),
    ("", "brand\nnew\n"),
    ("going\naway\n", ""),
    ("a\nb", "a\nc"),
    ("a\nb", "a\nb\n"),
    ("a\r\nb\r\n", "a\r\nB\r\n"),
    (ORIGINAL, MODIFIED),
]


class TestRoundTrip:
    @pytest.mark.parametrize("original,modified", CASES)
    def test_all_accepted_gives_modified(self, original, modified):
        hunks = _hunks(original, modified)
        for hunk in hunks:
            hunk.accept()
        assert materialize(original, hunks) == modified

    @pytest.mark.parametrize("original,modified", CASES)
    def test_all_rejected_gives_original(self, original, modified):
        hunks = _hunks(original, modified)
        for hunk in hunks:
            hunk.reject()
        assert materialize(original, hunks) == original

    @pytest.mark.parametrize("context_lines", [0, 1, 3])
    def test_undecided_counts_as_accepted(self, context_lines):
        hunks = _hunks(ORIGINAL, MODIFIED, context_lines)
        assert materialize(ORIGINAL, hunks) == MODIFIED

    def test_undecided_as_rejected(self):
        hunks = _hunks(ORIGINAL, MODIFIED)
        assert materialize(ORIGINAL, hunks, pending_as_accepted=False) == ORIGINAL


class TestPartialStaging:
    def test_accept_first_reject_second(self):
        hunks = _hunks(ORIGINAL, MODIFIED)
        assert len(hunks) == 2
        hunks[0].accept()
        hunks[1].reject()

        result = materialize(ORIGINAL, hunks)

        assert result == ORIGINAL.replace("l2\n", "X\n")

    def test_reject_first_keep_second_pending(self):
        hunks = _hunks(ORIGINAL, MODIFIED)
        hunks[0].reject()

        result = materialize(ORIGINAL, hunks)

        assert result == ORIGINAL.replace("l18\n", "Y\n")
        # No line duplicated or dropped
        assert len(split_lines(result)) == 20
