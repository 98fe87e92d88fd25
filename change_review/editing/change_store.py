"""
Pending change store — single owner of every in-flight diff and of the
conflicts detected against it.

A store instance is an explicit repository object: independent review
sessions use independent stores. All mutations for one path are
serialized; different paths may be driven from different threads.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..language import detect_language
from .conflict_resolver import (
    Conflict, ResolvedRegion, detect_conflicts, merge_with_base, resolve_text,
)
from .errors import (
    ChangeAlreadyFinalized, ConflictUnresolvedError, HunkIndexOutOfRange,
    NoSuchPendingChange, ReviewError, WriteFailure,
)
from .hunk_builder import DEFAULT_CONTEXT_LINES, Hunk, build_hunks
from .line_differ import diff_lines, split_lines
from .materializer import materialize
from .summary import ChangesSummary, summarize

logger = logging.getLogger(__name__)

# Diff status
PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"
PARTIAL = "partial"

# File change type
ADDED = "added"
MODIFIED = "modified"
DELETED = "deleted"


@dataclass
class DiffStats:
    additions: int = 0
    deletions: int = 0

    @property
    def changes(self) -> int:
        return self.additions + self.deletions


@dataclass
class FileDiff:
    """Pending change for one file.

    ``finalized`` is set once the whole file has been accepted (and
    written) or rejected; ``final_content`` holds what was written.
    """
    path: str
    original_content: str
    modified_content: str
    language: str
    hunks: list[Hunk] = field(default_factory=list)
    stats: DiffStats = field(default_factory=DiffStats)
    status: str = PENDING
    finalized: bool = False
    final_content: Optional[str] = None

    @property
    def change_type(self) -> str:
        return change_type(self.original_content, self.modified_content)


@dataclass(frozen=True)
class FileChangeEntry:
    path: str
    type: str
    status: str


def change_type(original_content: str, modified_content: str) -> str:
    if not original_content:
        return ADDED
    if not modified_content:
        return DELETED
    return MODIFIED


def derive_status(hunks: list[Hunk]) -> str:
    """Status implied by the hunk flags.

    ``accepted`` iff every hunk is accepted (vacuously true for no hunks),
    ``rejected`` iff every hunk is rejected, ``pending`` while nothing has
    been decided, ``partial`` otherwise.
    """
    if all(h.accepted for h in hunks):
        return ACCEPTED
    if all(h.rejected for h in hunks):
        return REJECTED
    if not any(h.decided for h in hunks):
        return PENDING
    return PARTIAL


def generate_diff(
    path: str,
    original_content: str,
    modified_content: str,
    language: str | None = None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> FileDiff:
    """Diff two full snapshots of *path* into a new :class:`FileDiff`.

    Identical content yields no hunks and short-circuits to ``accepted``.
    """
    ops = diff_lines(split_lines(original_content), split_lines(modified_content))
    hunks = build_hunks(ops, context_lines=context_lines)
    stats = DiffStats(
        additions=sum(h.additions for h in hunks),
        deletions=sum(h.deletions for h in hunks),
    )
    return FileDiff(
        path=path,
        original_content=original_content,
        modified_content=modified_content,
        language=language or detect_language(path),
        hunks=hunks,
        stats=stats,
        status=ACCEPTED if not hunks else PENDING,
    )


class PendingChangeStore:
    """Owns the path → diff and path → conflicts maps.

    Parameters
    ----------
    writer:
        Object with ``write_text(path, content)`` and ``delete(path)``
        (see :class:`~change_review.editing.file_io.LocalFileSystem`).
        When None, :meth:`accept_change` only returns the content and the
        caller is responsible for writing it.
    reader:
        Optional object with ``read_text(path)``. When set,
        :meth:`accept_change` re-reads the base before writing and runs
        conflict detection if it drifted.
    context_lines:
        Context used by :meth:`generate_diff`.
    """

    def __init__(self, writer=None, reader=None,
                 context_lines: int = DEFAULT_CONTEXT_LINES) -> None:
        self._writer = writer
        self._reader = reader
        self._context_lines = context_lines
        self._pending: dict[str, FileDiff] = {}
        self._conflicts: dict[str, list[Conflict]] = {}
        self._resolved: dict[str, list[ResolvedRegion]] = {}
        self._bases: dict[str, str] = {}
        self._lock = threading.Lock()
        self._path_locks: dict[str, threading.RLock] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def generate_diff(self, path: str, original_content: str,
                      modified_content: str,
                      language: str | None = None) -> FileDiff:
        """Compute a diff with this store's context setting (not registered)."""
        return generate_diff(path, original_content, modified_content,
                             language, context_lines=self._context_lines)

    def add_pending_change(self, diff: FileDiff) -> None:
        """Register *diff*, replacing any entry for the same path.

        Replacing discards hunk staging and conflict state for the path.
        """
        with self._locked(diff.path):
            with self._lock:
                replaced = diff.path in self._pending
                self._pending[diff.path] = diff
                self._drop_conflict_state(diff.path)
        logger.info(
            "[Review] %s pending change for %s (+%d -%d, %d hunk(s))",
            "Replaced" if replaced else "Added", diff.path,
            diff.stats.additions, diff.stats.deletions, len(diff.hunks),
        )

    def propose_change(self, path: str, original_content: str,
                       modified_content: str,
                       language: str | None = None) -> FileDiff:
        """Generate and register a diff in one step."""
        diff = self.generate_diff(path, original_content, modified_content, language)
        self.add_pending_change(diff)
        return diff

    def remove_pending_change(self, path: str) -> None:
        """Stop tracking *path* entirely."""
        with self._locked(path):
            with self._lock:
                if path not in self._pending:
                    raise NoSuchPendingChange(path)
                del self._pending[path]
                self._drop_conflict_state(path)
                self._path_locks.pop(path, None)
        logger.info("[Review] Removed %s", path)

    def clear_all(self) -> None:
        with self._lock:
            self._pending.clear()
            self._path_locks.clear()
            self._conflicts.clear()
            self._resolved.clear()
            self._bases.clear()

    # ------------------------------------------------------------------
    # Whole-file commands
    # ------------------------------------------------------------------

    def accept_change(self, path: str, current_base: str | None = None) -> str:
        """Materialize *path*, hand it to the writer, then mark it accepted.

        Undecided hunks count as accepted, rejected hunks keep the
        original text. If the base content (*current_base*, or what the
        reader returns) drifted from the diff's original content, conflict
        detection runs first and acceptance is refused while any conflict
        remains; compatible external edits are merged into the result.

        Returns
        -------
        str
            The content that was written.

        Raises
        ------
        NoSuchPendingChange, ChangeAlreadyFinalized,
        ConflictUnresolvedError, WriteFailure
        """
        with self._locked(path):
            diff = self._require(path)
            if diff.finalized:
                if diff.status == ACCEPTED:
                    return diff.final_content or ""
                raise ChangeAlreadyFinalized(path, diff.status)

            if current_base is None and self._reader is not None:
                current_base = self._reader.read_text(path)
            if current_base is not None:
                if current_base == diff.original_content:
                    self._drop_conflict_state(path)
                elif self._bases.get(path) != current_base:
                    self._detect(path, diff, current_base)

            conflicts = self._conflicts.get(path)
            if conflicts:
                logger.warning(
                    "[Review] Accept blocked for %s: %d unresolved conflict(s)",
                    path, len(conflicts),
                )
                raise ConflictUnresolvedError(path, len(conflicts))

            base = self._bases.get(path)
            if base is not None:
                content = merge_with_base(diff, base, self._resolved.get(path, ()))
            else:
                content = materialize(diff.original_content, diff.hunks)

            if diff.hunks or base is not None:
                self._write(diff, content)

            # Commit only after the write went through
            diff.final_content = content
            diff.status = ACCEPTED
            diff.finalized = True
            self._drop_conflict_state(path)

        logger.info("[Review] Accepted %s", path)
        return content

    def reject_change(self, path: str) -> None:
        """Discard the proposal for *path*; nothing is written."""
        with self._locked(path):
            diff = self._require(path)
            if diff.finalized:
                if diff.status == REJECTED:
                    return
                raise ChangeAlreadyFinalized(path, diff.status)
            diff.status = REJECTED
            diff.finalized = True
            self._drop_conflict_state(path)
        logger.info("[Review] Rejected %s", path)

    def accept_all_changes(self) -> dict[str, ReviewError]:
        """Accept every open change, one file at a time.

        Not atomic across files. Returns the failure for each path that
        could not be accepted; successful paths are absent.
        """
        failures: dict[str, ReviewError] = {}
        for path in self.open_paths():
            try:
                self.accept_change(path)
            except ReviewError as exc:
                logger.warning("[Review] Failed to accept %s: %s", path, exc)
                failures[path] = exc
        return failures

    def reject_all_changes(self) -> None:
        for path in self.open_paths():
            self.reject_change(path)

    # ------------------------------------------------------------------
    # Hunk staging
    # ------------------------------------------------------------------

    def accept_hunk(self, path: str, hunk_index: int) -> str:
        """Stage one hunk as accepted. Returns the recomputed status."""
        return self._stage(path, hunk_index, accept=True)

    def reject_hunk(self, path: str, hunk_index: int) -> str:
        """Stage one hunk as rejected. Returns the recomputed status."""
        return self._stage(path, hunk_index, accept=False)

    def _stage(self, path: str, hunk_index: int, accept: bool) -> str:
        with self._locked(path):
            diff = self._require(path)
            if diff.finalized:
                raise ChangeAlreadyFinalized(path, diff.status)
            if not 0 <= hunk_index < len(diff.hunks):
                raise HunkIndexOutOfRange(path, hunk_index, len(diff.hunks))

            hunk = diff.hunks[hunk_index]
            if accept:
                hunk.accept()
            else:
                hunk.reject()
            # Staging changes which hunks can collide with a drifted base
            base = self._bases.get(path)
            if base is not None:
                self._detect(path, diff, base)
            self._refresh_status(path, diff)
            status = diff.status

        logger.debug(
            "[Review] %s hunk %d of %s -> %s",
            "Accepted" if accept else "Rejected", hunk_index, path, status,
        )
        return status

    # ------------------------------------------------------------------
    # Conflicts
    # ------------------------------------------------------------------

    def detect_conflicts(self, path: str, current_base: str) -> list[Conflict]:
        """Compare the pending change with a freshly observed base.

        Replaces the recorded conflicts for *path*. Regions already
        resolved against the same base stay resolved; a different base
        starts over.
        """
        with self._locked(path):
            diff = self._require(path)
            if diff.finalized:
                raise ChangeAlreadyFinalized(path, diff.status)
            if current_base == diff.original_content:
                self._drop_conflict_state(path)
                self._refresh_status(path, diff)
                return []
            conflicts = self._detect(path, diff, current_base)
            self._refresh_status(path, diff)
            return list(conflicts)

    def resolve_conflict(self, path: str, conflict_index: int,
                         resolution: str) -> str:
        """Resolve one conflict with ``ours``, ``theirs`` or ``both``.

        Returns the text chosen for the region and removes the conflict
        from the path's list.
        """
        with self._locked(path):
            diff = self._require(path)
            if diff.finalized:
                raise ChangeAlreadyFinalized(path, diff.status)
            conflicts = self._conflicts.get(path, [])
            if not 0 <= conflict_index < len(conflicts):
                raise HunkIndexOutOfRange(
                    path, conflict_index, len(conflicts), what="conflict",
                )
            conflict = conflicts[conflict_index]
            text = resolve_text(conflict, resolution)
            self._resolved.setdefault(path, []).append(ResolvedRegion(
                start_line=conflict.start_line,
                end_line=conflict.end_line,
                content=text,
                resolution=resolution,
            ))
            self._conflicts[path] = (
                conflicts[:conflict_index] + conflicts[conflict_index + 1:]
            )
            remaining = len(self._conflicts[path])
            self._refresh_status(path, diff)

        logger.info(
            "[Conflict] Resolved lines %d-%d of %s with %r (%d left)",
            conflict.start_line, conflict.end_line, path, resolution, remaining,
        )
        return text

    def _detect(self, path: str, diff: FileDiff,
                current_base: str) -> list[Conflict]:
        if self._bases.get(path) != current_base:
            self._resolved[path] = []
        self._bases[path] = current_base
        resolved = {(r.start_line, r.end_line) for r in self._resolved.get(path, [])}
        conflicts = [
            c for c in detect_conflicts(diff, current_base)
            if (c.start_line, c.end_line) not in resolved
        ]
        self._conflicts[path] = conflicts
        return conflicts

    def _refresh_status(self, path: str, diff: FileDiff) -> None:
        """Re-derive status from the hunks; open conflicts cap it at partial."""
        status = derive_status(diff.hunks)
        if status == ACCEPTED and self._conflicts.get(path):
            status = PARTIAL
        diff.status = status

    def _drop_conflict_state(self, path: str) -> None:
        self._conflicts.pop(path, None)
        self._resolved.pop(path, None)
        self._bases.pop(path, None)

    # ------------------------------------------------------------------
    # Queries (side-effect free)
    # ------------------------------------------------------------------

    def get_diff(self, path: str) -> FileDiff:
        """The registered diff for *path*. Treat it as read-only."""
        with self._lock:
            diff = self._pending.get(path)
        if diff is None:
            raise NoSuchPendingChange(path)
        return diff

    def get_conflicts(self, path: str) -> list[Conflict]:
        with self._lock:
            return list(self._conflicts.get(path, []))

    def has_conflicts(self, path: str) -> bool:
        return bool(self.get_conflicts(path))

    def paths(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    def open_paths(self) -> list[str]:
        """Paths whose change has not been accepted or rejected as a whole."""
        with self._lock:
            return [p for p, d in self._pending.items() if not d.finalized]

    def preview(self, path: str, pending_as_accepted: bool = True) -> str:
        """Content :meth:`accept_change` would produce without drift."""
        with self._locked(path):
            diff = self._require(path)
            if diff.finalized and diff.final_content is not None:
                return diff.final_content
            return materialize(diff.original_content, diff.hunks,
                               pending_as_accepted=pending_as_accepted)

    def get_changes_summary(self) -> ChangesSummary:
        with self._lock:
            diffs = list(self._pending.values())
        return summarize(diffs)

    def get_changed_files(self) -> list[FileChangeEntry]:
        with self._lock:
            diffs = list(self._pending.values())
        return [FileChangeEntry(d.path, d.change_type, d.status) for d in diffs]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _locked(self, path: str) -> Iterator[None]:
        with self._lock:
            lock = self._path_locks.setdefault(path, threading.RLock())
        with lock:
            yield

    def _require(self, path: str) -> FileDiff:
        with self._lock:
            diff = self._pending.get(path)
        if diff is None:
            raise NoSuchPendingChange(path)
        return diff

    def _write(self, diff: FileDiff, content: str) -> None:
        if self._writer is None:
            return
        try:
            if diff.change_type == DELETED and not content:
                self._writer.delete(diff.path)
            else:
                self._writer.write_text(diff.path, content)
        except Exception as exc:
            logger.error("[Review] Write failed for %s: %s", diff.path, exc)
            raise WriteFailure(diff.path, exc) from exc
