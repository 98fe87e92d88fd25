"""
Hunk builder — groups raw edit operations into independently stageable
hunks with surrounding context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from .line_differ import ADD, CONTEXT, DELETE, Operation

DEFAULT_CONTEXT_LINES = 3


@dataclass
class LineChange:
    """A single line inside a hunk."""
    type: str                             # "add", "delete" or "context"
    content: str                          # line text without terminator
    old_line_number: Optional[int] = None
    new_line_number: Optional[int] = None
    eol: str = ""

    @property
    def line(self) -> str:
        """The raw line as it appears in the file."""
        return self.content + self.eol


@dataclass
class Hunk:
    """A contiguous block of changes plus context.

    ``old_start``/``old_lines`` and ``new_start``/``new_lines`` follow the
    unified diff header convention: 1-based start and line count, and a
    zero-length side reports the line just before the hunk.
    """
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    changes: list[LineChange] = field(default_factory=list)
    accepted: bool = False
    rejected: bool = False

    @property
    def additions(self) -> int:
        return sum(1 for c in self.changes if c.type == ADD)

    @property
    def deletions(self) -> int:
        return sum(1 for c in self.changes if c.type == DELETE)

    @property
    def decided(self) -> bool:
        return self.accepted or self.rejected

    @property
    def header(self) -> str:
        return (f"@@ -{self.old_start},{self.old_lines} "
                f"+{self.new_start},{self.new_lines} @@")

    @property
    def old_offset(self) -> int:
        """Number of original lines preceding this hunk."""
        return self.old_start - 1 if self.old_lines else self.old_start

    def accept(self) -> None:
        self.accepted = True
        self.rejected = False

    def reject(self) -> None:
        self.accepted = False
        self.rejected = True

    def old_side(self) -> list[str]:
        """Raw lines this hunk covers in the original content."""
        return [c.line for c in self.changes if c.type != ADD]

    def new_side(self) -> list[str]:
        """Raw lines this hunk produces in the modified content."""
        return [c.line for c in self.changes if c.type != DELETE]

    def anchored_changes(self) -> list[tuple[int, LineChange]]:
        """Pair every change with the original line it is attached to.

        Context and deleted lines anchor to their own original line. In a
        run of replacements the n-th added line anchors to the n-th deleted
        line, surplus additions to the last deleted one. A pure insertion
        anchors to the original line before it (line 1 at the top of the
        file).
        """
        anchored: list[tuple[int, LineChange]] = []
        current = self.old_offset
        run_deletes: list[int] = []
        added = 0
        for change in self.changes:
            if change.type == ADD:
                if run_deletes:
                    anchor = run_deletes[min(added, len(run_deletes) - 1)]
                else:
                    anchor = current
                added += 1
            else:
                current = change.old_line_number or current + 1
                anchor = current
                if change.type == DELETE:
                    run_deletes.append(current)
                else:
                    run_deletes, added = [], 0
            anchored.append((max(anchor, 1), change))
        return anchored

    def changed_span(self) -> Optional[tuple[int, int]]:
        """Original-coordinate range touched by this hunk's changes.

        Leading and trailing context are excluded. Returns None for a
        hunk without changes.
        """
        anchors = [a for a, c in self.anchored_changes() if c.type != CONTEXT]
        if not anchors:
            return None
        return min(anchors), max(anchors)


def build_hunks(
    operations: Sequence[Operation],
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> list[Hunk]:
    """Group *operations* into hunks.

    Parameters
    ----------
    operations:
        Edit script from :func:`diff_lines`.
    context_lines:
        Context kept around each run of changes. Runs separated by at
        most ``2 * context_lines`` context lines share a hunk.

    Returns
    -------
    list[Hunk]
        Hunks in increasing line order, never overlapping.
    """
    if context_lines < 0:
        raise ValueError("context_lines must be >= 0")

    ops = list(operations)

    # Line numbers consumed before each operation index
    old_before = [0] * (len(ops) + 1)
    new_before = [0] * (len(ops) + 1)
    for i, op in enumerate(ops):
        old_before[i + 1] = old_before[i] + (op.type != ADD)
        new_before[i + 1] = new_before[i] + (op.type != DELETE)

    groups: list[list[int]] = []
    for start, end in _change_runs(ops):
        if groups and start - groups[-1][1] <= 2 * context_lines:
            groups[-1][1] = end
        else:
            groups.append([start, end])

    hunks: list[Hunk] = []
    for start, end in groups:
        lo = max(0, start - context_lines)
        hi = min(len(ops), end + context_lines)
        old_count = old_before[hi] - old_before[lo]
        new_count = new_before[hi] - new_before[lo]

        changes: list[LineChange] = []
        old_no, new_no = old_before[lo], new_before[lo]
        for op in ops[lo:hi]:
            content, eol = _split_eol(op.content)
            change = LineChange(type=op.type, content=content, eol=eol)
            if op.type != ADD:
                old_no += 1
                change.old_line_number = old_no
            if op.type != DELETE:
                new_no += 1
                change.new_line_number = new_no
            changes.append(change)

        hunks.append(Hunk(
            old_start=old_before[lo] + (1 if old_count else 0),
            old_lines=old_count,
            new_start=new_before[lo] + (1 if new_count else 0),
            new_lines=new_count,
            changes=changes,
        ))
    return hunks


def _change_runs(ops: list[Operation]) -> list[tuple[int, int]]:
    """Return ``[start, end)`` index ranges of consecutive non-context ops."""
    runs: list[tuple[int, int]] = []
    i = 0
    while i < len(ops):
        if ops[i].type == CONTEXT:
            i += 1
            continue
        j = i
        while j < len(ops) and ops[j].type != CONTEXT:
            j += 1
        runs.append((i, j))
        i = j
    return runs


def _split_eol(line: str) -> tuple[str, str]:
    if line.endswith("\r\n"):
        return line[:-2], "\r\n"
    if line.endswith("\n"):
        return line[:-1], "\n"
    return line, ""
