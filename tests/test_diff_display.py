"""Tests for unified diff rendering and the hunk review TUI."""

import asyncio

from change_review.diff_display import (
    HunkReviewApp, format_colored_diff, render_unified,
)
from change_review.editing.change_store import PARTIAL, PendingChangeStore, generate_diff

ORIGINAL = "".join(f"l{i}\n" for i in range(1, 21))
MODIFIED = ORIGINAL.replace("l2\n", "X\n").replace("l18\n", "Y\n")


def test_render_unified():
    diff = generate_diff("a.txt", "a\nb\nc\n", "a\nB\nc\nd\n")

    assert render_unified(diff) == "\n".join([
        "--- a/a.txt",
        "+++ b/a.txt",
        "@@ -1,3 +1,4 @@",
        " a",
        "-b",
        "+B",
        " c",
        "+d",
    ])


def test_render_missing_newline_marker():
    diff = generate_diff("a.txt", "a\nb", "a\nc")
    assert render_unified(diff).endswith("+c\n\\ No newline at end of file")


def test_render_no_changes():
    assert render_unified(generate_diff("a.txt", "same\n", "same\n")) == ""


def test_colors():
    colored = format_colored_diff("@@ -1 +1 @@\n-old\n+new\n ctx")
    lines = colored.split("\n")
    assert lines[0].startswith("\033[36m")
    assert lines[1].startswith("\033[31m")
    assert lines[2].startswith("\033[32m")
    assert lines[3] == " ctx"


def test_review_app_stages_hunks():
    store = PendingChangeStore()
    store.propose_change("f.txt", ORIGINAL, MODIFIED)
    app = HunkReviewApp(store, ["f.txt"])

    async def drive():
        async with app.run_test() as pilot:
            await pilot.press("a")
            await pilot.press("r")
            await pilot.press("q")

    asyncio.run(drive())

    diff = store.get_diff("f.txt")
    assert diff.hunks[0].accepted
    assert diff.hunks[1].rejected
    assert diff.status == PARTIAL
    assert app.decisions == {"f.txt": None}
