"""
Conflict detector & resolver — guards a pending proposal against base
content that changed underneath it.

Both the proposal and the externally observed base are diffs against the
same original content, so every position is expressed in original line
numbers. A conflict is the intersection of a pending hunk's changed span
with an external change's span; external edits that touch no pending hunk
are compatible and are carried into the merged result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

from .errors import ConflictUnresolvedError, InvalidResolution
from .hunk_builder import Hunk, build_hunks
from .line_differ import ADD, DELETE, diff_lines, split_lines

if TYPE_CHECKING:
    from .change_store import FileDiff

logger = logging.getLogger(__name__)

OURS = "ours"
THEIRS = "theirs"
BOTH = "both"
RESOLUTIONS = (OURS, THEIRS, BOTH)


@dataclass(frozen=True)
class Conflict:
    """Region where the proposal and the observed base both changed lines.

    ``start_line``/``end_line`` are 1-based, inclusive, in the coordinates
    of the original content the proposal was computed against.
    """
    start_line: int
    end_line: int
    our_content: str
    their_content: str
    hunk_index: int = -1


@dataclass(frozen=True)
class ResolvedRegion:
    """Text chosen for a conflict region once it has been resolved."""
    start_line: int
    end_line: int
    content: str
    resolution: str


def resolve_text(conflict: Conflict, resolution: str) -> str:
    """Return the text a *resolution* selects for *conflict*."""
    if resolution == OURS:
        return conflict.our_content
    if resolution == THEIRS:
        return conflict.their_content
    if resolution == BOTH:
        ours = split_lines(conflict.our_content)
        theirs = split_lines(conflict.their_content)
        # Insertions after the same line both carry that line; keep it once
        shared = 0
        while (shared < min(len(ours), len(theirs))
               and ours[shared] == theirs[shared]
               and ours[shared].endswith("\n")):
            shared += 1
        head = "".join(ours[:shared])
        our_rest = "".join(ours[shared:])
        their_rest = "".join(theirs[shared:])
        if our_rest and not our_rest.endswith("\n") and their_rest:
            our_rest += "\n"
        return head + our_rest + their_rest
    raise InvalidResolution(
        f"Unknown resolution {resolution!r}; expected one of {', '.join(RESOLUTIONS)}"
    )


def external_hunks(original_content: str, current_base: str) -> list[Hunk]:
    """Diff the original content against the freshly observed base."""
    return build_hunks(
        diff_lines(split_lines(original_content), split_lines(current_base)),
        context_lines=0,
    )


def detect_conflicts(diff: "FileDiff", current_base: str) -> list[Conflict]:
    """Find pending hunks that collide with external edits.

    Parameters
    ----------
    diff:
        The pending change.
    current_base:
        Content now observed where ``diff.original_content`` was read.

    Returns
    -------
    list[Conflict]
        One conflict per (pending hunk, external hunk) pair whose changed
        spans intersect, ordered by line. Rejected hunks never conflict.
    """
    if current_base == diff.original_content:
        return []

    original = split_lines(diff.original_content)
    theirs = external_hunks(diff.original_content, current_base)
    ours_map = _lines_by_anchor(original, diff.hunks, lambda h: not h.rejected)
    theirs_map = _lines_by_anchor(original, theirs, lambda h: True)
    their_spans = [s for s in (h.changed_span() for h in theirs) if s]

    conflicts: list[Conflict] = []
    for index, hunk in enumerate(diff.hunks):
        if hunk.rejected:
            continue
        span = hunk.changed_span()
        if span is None:
            continue
        for other in their_spans:
            start = max(span[0], other[0])
            end = min(span[1], other[1])
            if start > end:
                continue
            conflicts.append(Conflict(
                start_line=start,
                end_line=end,
                our_content=_region_text(ours_map, start, end),
                their_content=_region_text(theirs_map, start, end),
                hunk_index=index,
            ))

    logger.info(
        "[Conflict] %s: %d external hunk(s), %d conflict(s)",
        diff.path, len(theirs), len(conflicts),
    )
    return conflicts


def merge_with_base(
    diff: "FileDiff",
    current_base: str,
    resolved: Sequence[ResolvedRegion] = (),
) -> str:
    """Combine the staged proposal with an externally changed base.

    Pending hunks contribute according to their staging flags (undecided
    counts as accepted), external edits outside every pending hunk are
    kept, and each conflict region takes its resolved text.

    Raises
    ------
    ConflictUnresolvedError
        If any current conflict has no matching resolved region.
    """
    current = detect_conflicts(diff, current_base)
    regions = {(r.start_line, r.end_line): r for r in resolved}
    unresolved = [c for c in current if (c.start_line, c.end_line) not in regions]
    if unresolved:
        raise ConflictUnresolvedError(diff.path, len(unresolved))
    applied = {
        c.start_line: regions[(c.start_line, c.end_line)] for c in current
    }

    original = split_lines(diff.original_content)
    theirs = external_hunks(diff.original_content, current_base)
    ours_map = _lines_by_anchor(original, diff.hunks, lambda h: not h.rejected)
    theirs_map = _lines_by_anchor(original, theirs, lambda h: True)
    our_spans = [
        s for s in (h.changed_span() for h in diff.hunks if not h.rejected) if s
    ]

    out: list[str] = []
    line = 1
    while line < len(ours_map):
        region = applied.get(line)
        if region is not None:
            out.append(region.content)
            line = region.end_line + 1
            continue
        if any(start <= line <= end for start, end in our_spans):
            out.extend(ours_map[line])
        else:
            out.extend(theirs_map[line])
        line += 1
    return "".join(out)


# ------------------------------------------------------------------
# Internals
# ------------------------------------------------------------------

def _lines_by_anchor(
    original: list[str],
    hunks: Sequence[Hunk],
    include: Callable[[Hunk], bool],
) -> list[list[str]]:
    """Map every original line number to the lines it becomes.

    Index 0 is unused. Hunks for which *include* is false keep their
    original lines.
    """
    size = max(len(original), 1)
    by_anchor: list[list[str]] = [[] for _ in range(size + 1)]
    for number, line in enumerate(original, start=1):
        by_anchor[number] = [line]

    for hunk in hunks:
        if not include(hunk):
            continue
        first = hunk.old_offset + 1
        for number in range(first, first + hunk.old_lines):
            by_anchor[number] = []

        top: list[str] = []
        for anchor, change in hunk.anchored_changes():
            if change.type == DELETE:
                continue
            if change.type == ADD and hunk.old_lines == 0 and hunk.old_offset == 0:
                top.append(change.line)
                continue
            by_anchor[anchor].append(change.line)
        by_anchor[1][:0] = top
    return by_anchor


def _region_text(by_anchor: list[list[str]], start: int, end: int) -> str:
    return "".join("".join(by_anchor[n]) for n in range(start, end + 1))
