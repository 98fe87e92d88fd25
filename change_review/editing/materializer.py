"""
Materializer — rebuilds file content from the original text and the
staged decision on every hunk.
"""

from __future__ import annotations

from typing import Sequence

from .hunk_builder import Hunk
from .line_differ import split_lines


def hunk_takes_new_side(hunk: Hunk, pending_as_accepted: bool = True) -> bool:
    """Whether *hunk* contributes its modified side to the final text."""
    if hunk.rejected:
        return False
    return hunk.accepted or pending_as_accepted


def materialize(
    original_content: str,
    hunks: Sequence[Hunk],
    pending_as_accepted: bool = True,
) -> str:
    """Produce final content according to each hunk's staging flags.

    Accepted hunks (and undecided ones when *pending_as_accepted*) emit
    their added and context lines; rejected hunks emit their deleted and
    context lines. Text between hunks is copied verbatim from
    *original_content*.
    """
    original = split_lines(original_content)
    out: list[str] = []
    cursor = 0

    for hunk in hunks:
        start = hunk.old_offset
        out.extend(original[cursor:start])
        if hunk_takes_new_side(hunk, pending_as_accepted):
            out.extend(hunk.new_side())
        else:
            out.extend(hunk.old_side())
        cursor = start + hunk.old_lines

    out.extend(original[cursor:])
    return "".join(out)
