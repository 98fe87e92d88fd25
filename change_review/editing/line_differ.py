"""
Line differencer — Myers shortest edit script between two line sequences.

Lines are compared exactly, terminators included, so that a script can be
replayed to reproduce either side byte-for-byte.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)

ADD = "add"
DELETE = "delete"
CONTEXT = "context"


@dataclass(frozen=True)
class Operation:
    """One elemental edit: keep, remove or insert a single line."""
    type: str       # "add", "delete" or "context"
    content: str    # raw line, terminator included


def split_lines(text: str) -> list[str]:
    """Split *text* into lines, keeping ``\\n`` / ``\\r\\n`` terminators.

    Only newline characters delimit lines; other separators that
    ``str.splitlines`` honours (form feeds, unicode breaks) stay inside
    the line.
    """
    if not text:
        return []
    lines = text.split("\n")
    result = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        result.append(lines[-1])
    return result


def diff_lines(original: Sequence[str], modified: Sequence[str]) -> list[Operation]:
    """Compute a minimal edit script turning *original* into *modified*.

    Parameters
    ----------
    original:
        Lines of the baseline content.
    modified:
        Lines of the proposed content.

    Returns
    -------
    list[Operation]
        ``context`` for shared lines, ``delete`` for lines only in
        *original*, ``add`` for lines only in *modified*, in order.
        Within every run of changes deletions come first.
    """
    a = list(original)
    b = list(modified)

    # Common prefix / suffix never take part in the search
    prefix = 0
    while prefix < len(a) and prefix < len(b) and a[prefix] == b[prefix]:
        prefix += 1
    suffix = 0
    while (suffix < len(a) - prefix and suffix < len(b) - prefix
           and a[-1 - suffix] == b[-1 - suffix]):
        suffix += 1

    head = [Operation(CONTEXT, line) for line in a[:prefix]]
    tail = [Operation(CONTEXT, line) for line in a[len(a) - suffix:]]
    middle_a = a[prefix:len(a) - suffix]
    middle_b = b[prefix:len(b) - suffix]

    if not middle_a:
        middle = [Operation(ADD, line) for line in middle_b]
    elif not middle_b:
        middle = [Operation(DELETE, line) for line in middle_a]
    else:
        middle = _myers(middle_a, middle_b)

    ops = _deletions_first(head + middle + tail)
    logger.debug(
        "[Review] diff_lines: %d -> %d lines, %d ops",
        len(a), len(b), len(ops),
    )
    return ops


# ------------------------------------------------------------------
# Internals
# ------------------------------------------------------------------

def _myers(a: list[str], b: list[str]) -> list[Operation]:
    """Greedy forward Myers search with a V-array trace for backtracking."""
    n, m = len(a), len(b)
    max_d = n + m
    offset = max_d + 1
    v = [0] * (2 * max_d + 3)
    trace: list[list[int]] = []

    for d in range(max_d + 1):
        trace.append(v[:])
        done = False
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[offset + k] = x
            if x >= n and y >= m:
                done = True
                break
        if done:
            break

    return _backtrack(a, b, trace, offset)


def _backtrack(a: list[str], b: list[str], trace: list[list[int]],
               offset: int) -> list[Operation]:
    x, y = len(a), len(b)
    ops: list[Operation] = []

    for d in range(len(trace) - 1, -1, -1):
        v = trace[d]
        k = x - y
        if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = v[offset + prev_k]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            ops.append(Operation(CONTEXT, a[x - 1]))
            x -= 1
            y -= 1
        if d > 0:
            if x == prev_x:
                ops.append(Operation(ADD, b[y - 1]))
            else:
                ops.append(Operation(DELETE, a[x - 1]))
        x, y = prev_x, prev_y

    ops.reverse()
    return ops


def _deletions_first(ops: list[Operation]) -> list[Operation]:
    """Reorder each run of changes so deletions precede insertions."""
    result: list[Operation] = []
    deletes: list[Operation] = []
    adds: list[Operation] = []
    for op in ops:
        if op.type == CONTEXT:
            result.extend(deletes)
            result.extend(adds)
            deletes, adds = [], []
            result.append(op)
        elif op.type == DELETE:
            deletes.append(op)
        else:
            adds.append(op)
    result.extend(deletes)
    result.extend(adds)
    return result
