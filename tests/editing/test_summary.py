"""Tests for the change summary and risk heuristic."""

import pytest

from change_review.editing.change_store import (
    FileChangeEntry, PendingChangeStore,
)
from change_review.editing.summary import (
    HIGH, LOW, MEDIUM, ChangesSummary, RiskThresholds, classify_risk,
    describe_changes,
)


class TestClassifyRisk:
    def test_small_change_is_low(self):
        risk = classify_risk(ChangesSummary(1, 10, 2))
        assert risk.level == LOW
        assert risk.warnings == []
        assert risk.label == "Low Risk"

    @pytest.mark.parametrize("files,level", [(5, LOW), (6, MEDIUM), (11, HIGH)])
    def test_file_count(self, files, level):
        assert classify_risk(ChangesSummary(files, 1, 0)).level == level

    @pytest.mark.parametrize("lines,level", [(200, LOW), (201, MEDIUM), (501, HIGH)])
    def test_line_count(self, lines, level):
        assert classify_risk(ChangesSummary(1, lines, 0)).level == level

    def test_more_deletions_raises_to_medium(self):
        risk = classify_risk(ChangesSummary(1, 1, 3))
        assert risk.level == MEDIUM
        assert "More deletions than additions" in risk.warnings

    def test_deletions_do_not_lower_high(self):
        risk = classify_risk(ChangesSummary(20, 1, 3))
        assert risk.level == HIGH
        assert len(risk.warnings) == 2

    def test_custom_thresholds(self):
        thresholds = RiskThresholds(medium_files=0, high_files=1)
        assert classify_risk(ChangesSummary(1, 1, 0), thresholds).level == MEDIUM


class TestDescribeChanges:
    def test_mixed(self):
        entries = [
            FileChangeEntry("new.py", "added", "pending"),
            FileChangeEntry("a.py", "modified", "pending"),
            FileChangeEntry("b.py", "modified", "partial"),
            FileChangeEntry("gone.py", "deleted", "rejected"),
        ]
        text = describe_changes(entries, ChangesSummary(3, 12, 1))
        assert text == (
            "This change affects 1 new file, 2 modified files "
            "with a total of 12 additions and 1 deletion."
        )

    def test_nothing_pending(self):
        assert describe_changes([], ChangesSummary()) == "No pending changes."


class TestStoreSummary:
    def test_rejected_files_excluded(self):
        store = PendingChangeStore()
        store.propose_change("a.py", "x\n", "y\nz\n")
        store.propose_change("b.py", "x\n", "w\n")
        store.propose_change("c.py", "x\n", "")
        store.reject_change("c.py")

        summary = store.get_changes_summary()

        assert (summary.files_changed, summary.additions, summary.deletions) == (2, 3, 2)
        assert summary.changes == 5
