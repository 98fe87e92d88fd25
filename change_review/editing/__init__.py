"""Reviewed editing — diff, stage, resolve and apply proposed file changes."""

from .line_differ import Operation, diff_lines, split_lines
from .hunk_builder import Hunk, LineChange, build_hunks
from .materializer import materialize
from .conflict_resolver import Conflict, ResolvedRegion, detect_conflicts, resolve_text
from .change_store import (
    PendingChangeStore, FileDiff, DiffStats, FileChangeEntry,
    generate_diff, derive_status,
)
from .summary import (
    ChangesSummary, RiskAssessment, RiskThresholds,
    classify_risk, describe_changes,
)
from .file_io import LocalFileSystem
from .errors import (
    ReviewError, NoSuchPendingChange, HunkIndexOutOfRange,
    ConflictUnresolvedError, WriteFailure, ChangeAlreadyFinalized,
    InvalidResolution,
)

__all__ = [
    "Operation", "diff_lines", "split_lines",
    "Hunk", "LineChange", "build_hunks",
    "materialize",
    "Conflict", "ResolvedRegion", "detect_conflicts", "resolve_text",
    "PendingChangeStore", "FileDiff", "DiffStats", "FileChangeEntry",
    "generate_diff", "derive_status",
    "ChangesSummary", "RiskAssessment", "RiskThresholds",
    "classify_risk", "describe_changes",
    "LocalFileSystem",
    "ReviewError", "NoSuchPendingChange", "HunkIndexOutOfRange",
    "ConflictUnresolvedError", "WriteFailure", "ChangeAlreadyFinalized",
    "InvalidResolution",
]
