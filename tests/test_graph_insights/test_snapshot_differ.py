"""Tests for SnapshotDiffer: classifying changes between two snapshots."""
from __future__ import annotations

import pytest

from src.graph_insights.services.snapshot_differ import SnapshotDiffer, classify_change
from src.shared.config import InsightsConfig
from src.shared.models.insights import DiffChangeType, SnapshotDiff
from src.shared.models.issues import Issue
from tests.fixtures import make_issue


@pytest.fixture
def differ() -> SnapshotDiffer:
    return SnapshotDiffer(InsightsConfig(include_closed=False))


class TestIdempotence:
    def test_identical_snapshots(self, differ: SnapshotDiffer, project_issues: list[Issue]):
        result = differ.diff(project_issues, project_issues)

        assert isinstance(result, SnapshotDiff)
        assert result.changes == []
        assert result.new_count == 0
        assert result.closed_count == 0
        assert result.modified_count == 0
        assert result.reopened_count == 0
        assert result.density_delta == 0.0
        assert result.cycles_introduced == 0
        assert result.cycles_resolved == 0

    def test_both_empty(self, differ: SnapshotDiffer):
        result = differ.diff([], [])
        assert result.changes == []
        assert result.density_delta == 0.0


class TestClassification:
    def test_closed_is_not_also_modified(self, differ: SnapshotDiffer):
        old = [{"id": "A", "status": "open", "title": "X"}]
        current = [{"id": "A", "status": "closed", "title": "X"}]
        result = differ.diff(old, current)

        assert len(result.changes) == 1
        change = result.changes[0]
        assert change.change_type is DiffChangeType.CLOSED
        assert change.changed_fields is None
        assert result.closed_count == 1
        assert result.modified_count == 0

    def test_field_level_modification(self, differ: SnapshotDiffer):
        old = [{"id": "A", "status": "open", "title": "X"}]
        current = [{"id": "A", "status": "open", "title": "Y"}]
        result = differ.diff(old, current)

        assert len(result.changes) == 1
        change = result.changes[0]
        assert change.change_type is DiffChangeType.MODIFIED
        assert change.changed_fields == ["title"]
        assert change.previous_values == {"title": "X"}
        assert change.new_values == {"title": "Y"}
        assert change.title == "Y"
        assert result.modified_count == 1

    @pytest.mark.parametrize("old_status", ["open", "in_progress", "blocked"])
    def test_active_to_closed(self, old_status: str):
        change = classify_change(Issue(id="A", status=old_status), Issue(id="A", status="closed"))
        assert change is not None
        assert change.change_type is DiffChangeType.CLOSED

    @pytest.mark.parametrize("new_status", ["open", "in_progress", "blocked"])
    def test_reopened(self, new_status: str):
        change = classify_change(Issue(id="A", status="closed"), Issue(id="A", status=new_status))
        assert change is not None
        assert change.change_type is DiffChangeType.REOPENED

    def test_deferred_to_closed_is_modification(self):
        change = classify_change(Issue(id="A", status="deferred"), Issue(id="A", status="closed"))
        assert change is not None
        assert change.change_type is DiffChangeType.MODIFIED
        assert change.changed_fields == ["status"]
        assert change.previous_values == {"status": "deferred"}

    def test_closed_to_pinned_is_modification(self):
        change = classify_change(Issue(id="A", status="closed"), Issue(id="A", status="pinned"))
        assert change is not None
        assert change.change_type is DiffChangeType.MODIFIED

    def test_multiple_fields_in_fixed_order(self):
        old = Issue(id="A", title="T", priority=2, owner=None, updated_at="2026-01-01")
        new = Issue(id="A", title="T", priority=0, owner="dana", updated_at="2026-01-02")
        change = classify_change(old, new)

        assert change is not None
        assert change.changed_fields == ["priority", "owner", "updated_at"]
        assert change.previous_values == {"priority": 2, "owner": None, "updated_at": "2026-01-01"}
        assert change.new_values == {"priority": 0, "owner": "dana", "updated_at": "2026-01-02"}

    def test_untracked_field_change_ignored(self):
        old = Issue(id="A", description="before", labels=["x"])
        new = Issue(id="A", description="after", labels=["y"])
        assert classify_change(old, new) is None

    def test_new_issue_regardless_of_fields(self):
        change = classify_change(None, Issue(id="N", status="closed", title="Already done"))
        assert change is not None
        assert change.change_type is DiffChangeType.NEW
        assert change.title == "Already done"


class TestSnapshotReport:
    def test_new_issue_detected_once(self, differ: SnapshotDiffer, project_issues: list[Issue]):
        current = [*project_issues, make_issue("TEST-009", title="New feature")]
        result = differ.diff(project_issues, current, since_ref="HEAD~5")

        assert result.new_count == 1
        assert [(c.issue_id, c.change_type) for c in result.changes] == [
            ("TEST-009", DiffChangeType.NEW)
        ]
        assert result.since_ref == "HEAD~5"

    def test_removed_issue_not_reported(self, differ: SnapshotDiffer, project_issues: list[Issue]):
        result = differ.diff(project_issues, project_issues[:-1])
        assert result.changes == []

    def test_counts_are_tallies(self, differ: SnapshotDiffer):
        old = [
            make_issue("A", status="open"),
            make_issue("B", status="closed"),
            make_issue("C", title="before"),
            make_issue("D"),
        ]
        current = [
            make_issue("A", status="closed"),
            make_issue("B", status="in_progress"),
            make_issue("C", title="after"),
            make_issue("D"),
            make_issue("E"),
        ]
        result = differ.diff(old, current, project_path="/p")

        assert (
            result.new_count,
            result.closed_count,
            result.modified_count,
            result.reopened_count,
        ) == (1, 1, 1, 1)
        assert [c.issue_id for c in result.changes] == ["A", "B", "C", "E"]
        assert result.project_path == "/p"

    def test_density_delta_and_cycles(self, differ: SnapshotDiffer):
        old = [make_issue("A"), make_issue("B")]
        current = [make_issue("A", ["B"]), make_issue("B", ["A"])]
        result = differ.diff(old, current)

        assert result.density_delta == pytest.approx(1.0)
        assert result.cycles_introduced == 1
        assert result.cycles_resolved == 0

        reverse = differ.diff(current, old)
        assert reverse.density_delta == pytest.approx(-1.0)
        assert reverse.cycles_resolved == 1

    def test_null_field_in_old_snapshot_is_modification(self, differ: SnapshotDiffer):
        old = [{"id": "A", "title": "X", "priority": None}]
        current = [{"id": "A", "title": "X", "priority": 1}]
        result = differ.diff(old, current)

        [change] = result.changes
        assert change.change_type is DiffChangeType.MODIFIED
        assert change.previous_values == {"priority": 2}
        assert result.new_count == 0

    def test_bad_records_skipped(self, differ: SnapshotDiffer):
        result = differ.diff([{"title": "no id"}], [{"id": "A"}, {"status": "open"}])
        assert [c.issue_id for c in result.changes] == ["A"]
