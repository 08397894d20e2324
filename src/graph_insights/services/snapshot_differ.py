"""Point-in-time change report between two issue snapshots."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from src.graph_insights.services.cycle_detector import CycleDetector
from src.graph_insights.services.density import compute_density
from src.graph_insights.services.graph_builder import GraphBuilder
from src.graph_insights.services.issue_loader import parse_issue_records
from src.shared.config import InsightsConfig
from src.shared.constants import DIFF_FIELDS
from src.shared.models.insights import DiffChange, DiffChangeType, SnapshotDiff
from src.shared.models.issues import Issue, IssueStatus

logger = logging.getLogger(__name__)


def classify_change(old: Issue | None, current: Issue) -> DiffChange | None:
    """Classify how *current* differs from its *old* counterpart.

    Returns None when none of the compared fields changed. A close or reopen
    is reported as such and never additionally as a modification.
    """
    if old is None:
        return DiffChange(
            issue_id=current.id, title=current.title, change_type=DiffChangeType.NEW
        )

    if old.is_active and current.status == IssueStatus.CLOSED.value:
        return DiffChange(
            issue_id=current.id, title=current.title, change_type=DiffChangeType.CLOSED
        )

    if old.status == IssueStatus.CLOSED.value and current.is_active:
        return DiffChange(
            issue_id=current.id, title=current.title, change_type=DiffChangeType.REOPENED
        )

    changed_fields: list[str] = []
    previous_values: dict[str, Any] = {}
    new_values: dict[str, Any] = {}
    for field_name in DIFF_FIELDS:
        old_value = getattr(old, field_name)
        new_value = getattr(current, field_name)
        if old_value != new_value:
            changed_fields.append(field_name)
            previous_values[field_name] = old_value
            new_values[field_name] = new_value

    if not changed_fields:
        return None
    return DiffChange(
        issue_id=current.id,
        title=current.title,
        change_type=DiffChangeType.MODIFIED,
        changed_fields=changed_fields,
        previous_values=previous_values,
        new_values=new_values,
    )


class SnapshotDiffer:
    """Compares an older snapshot of issues against the current set.

    Issues present only in the older snapshot are not reported; the tracker
    never hard-deletes, so their absence is not treated as a change.
    """

    def __init__(self, config: InsightsConfig | None = None) -> None:
        self.config = config or InsightsConfig()
        self._builder = GraphBuilder(include_closed=self.config.include_closed)
        self._cycles = CycleDetector()

    def diff(
        self,
        old: Iterable[Any],
        current: Iterable[Any],
        since_ref: str | None = None,
        project_path: str | None = None,
    ) -> SnapshotDiff:
        """Diff two snapshots given as issues or raw issue records."""
        old_issues = parse_issue_records(old)
        current_issues = parse_issue_records(current)

        old_by_id = {issue.id: issue for issue in old_issues}
        current_by_id = {issue.id: issue for issue in current_issues}

        changes: list[DiffChange] = []
        for issue_id, issue in current_by_id.items():
            change = classify_change(old_by_id.get(issue_id), issue)
            if change is not None:
                changes.append(change)

        counts = {change_type: 0 for change_type in DiffChangeType}
        for change in changes:
            counts[change.change_type] += 1

        old_graph = self._builder.build(old_issues)
        current_graph = self._builder.build(current_issues)
        old_cycles = {frozenset(c.issues) for c in self._cycles.detect(old_graph)}
        current_cycles = {frozenset(c.issues) for c in self._cycles.detect(current_graph)}

        result = SnapshotDiff(
            project_path=project_path,
            since_ref=since_ref,
            new_count=counts[DiffChangeType.NEW],
            closed_count=counts[DiffChangeType.CLOSED],
            modified_count=counts[DiffChangeType.MODIFIED],
            reopened_count=counts[DiffChangeType.REOPENED],
            changes=changes,
            density_delta=compute_density(current_graph) - compute_density(old_graph),
            cycles_introduced=len(current_cycles - old_cycles),
            cycles_resolved=len(old_cycles - current_cycles),
        )
        logger.info(
            "Snapshot diff%s: %d new, %d closed, %d modified, %d reopened",
            f" since {since_ref}" if since_ref else "",
            result.new_count,
            result.closed_count,
            result.modified_count,
            result.reopened_count,
        )
        return result
