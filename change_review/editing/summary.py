"""
Summary reporter — aggregate statistics and a risk heuristic across all
tracked changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Sequence

if TYPE_CHECKING:
    from .change_store import FileChangeEntry, FileDiff

LOW = "low"
MEDIUM = "medium"
HIGH = "high"


@dataclass(frozen=True)
class ChangesSummary:
    files_changed: int = 0
    additions: int = 0
    deletions: int = 0

    @property
    def changes(self) -> int:
        return self.additions + self.deletions


@dataclass(frozen=True)
class RiskThresholds:
    """File-count and line-count limits for :func:`classify_risk`."""
    medium_files: int = 5
    high_files: int = 10
    medium_lines: int = 200
    high_lines: int = 500


@dataclass
class RiskAssessment:
    level: str = LOW
    warnings: list[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.level.capitalize()} Risk"


def summarize(diffs: Iterable["FileDiff"]) -> ChangesSummary:
    """Sum stats over every diff whose status is not ``rejected``."""
    files = additions = deletions = 0
    for diff in diffs:
        if diff.status == "rejected":
            continue
        files += 1
        additions += diff.stats.additions
        deletions += diff.stats.deletions
    return ChangesSummary(files, additions, deletions)


def classify_risk(
    summary: ChangesSummary,
    thresholds: RiskThresholds | None = None,
) -> RiskAssessment:
    """Qualitative risk of applying *summary*.

    Presentation heuristic only; nothing in the engine depends on it.
    """
    t = thresholds or RiskThresholds()
    risk = RiskAssessment()

    if summary.files_changed > t.high_files:
        risk.warnings.append("Large number of files changed")
        risk.level = HIGH
    elif summary.files_changed > t.medium_files:
        risk.warnings.append("Multiple files affected")
        risk.level = MEDIUM

    if summary.changes > t.high_lines:
        risk.warnings.append("Extensive code modifications")
        risk.level = HIGH
    elif summary.changes > t.medium_lines:
        risk.warnings.append("Significant code changes")
        if risk.level != HIGH:
            risk.level = MEDIUM

    if summary.deletions > 0 and summary.deletions > summary.additions:
        risk.warnings.append("More deletions than additions")
        if risk.level != HIGH:
            risk.level = MEDIUM

    return risk


def describe_changes(
    entries: Sequence["FileChangeEntry"],
    summary: ChangesSummary,
) -> str:
    """One-sentence human description of the pending change set."""
    counts = {"added": 0, "modified": 0, "deleted": 0}
    for entry in entries:
        if entry.status != "rejected":
            counts[entry.type] += 1

    parts: list[str] = []
    for kind, noun in (("added", "new"), ("modified", "modified"),
                       ("deleted", "deleted")):
        n = counts[kind]
        if n:
            parts.append(f"{n} {noun} file{'s' if n != 1 else ''}")
    if not parts:
        return "No pending changes."

    adds = f"{summary.additions} addition{'s' if summary.additions != 1 else ''}"
    dels = f"{summary.deletions} deletion{'s' if summary.deletions != 1 else ''}"
    return (f"This change affects {', '.join(parts)} "
            f"with a total of {adds} and {dels}.")
