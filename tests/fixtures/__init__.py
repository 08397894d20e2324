"""Test fixtures for graph insight tests.

Provides issue factories and sample snapshot files:
- sample_issues.jsonl: eight-issue project export (one record per line)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from src.graph_insights.services.graph_builder import GraphBuilder, IssueGraph
from src.shared.models.issues import DependencyEdge, Issue

FIXTURES_DIR = Path(__file__).parent


def fixture_path(name: str) -> Path:
    """Return the absolute path to a named fixture file."""
    path = FIXTURES_DIR / name
    if not path.exists():
        raise FileNotFoundError(f"Fixture not found: {path}")
    return path


def load_issues_jsonl() -> str:
    """Load the sample JSONL export as a string."""
    return fixture_path("sample_issues.jsonl").read_text(encoding="utf-8")


def make_issue(
    issue_id: str,
    depends_on: list[str] | None = None,
    *,
    parent: str | None = None,
    **fields: Any,
) -> Issue:
    """Build an Issue whose blocking dependencies are *depends_on*."""
    deps = [
        DependencyEdge(issue_id=issue_id, depends_on_id=target, type="blocks")
        for target in depends_on or []
    ]
    if parent is not None:
        deps.append(
            DependencyEdge(issue_id=issue_id, depends_on_id=parent, type="parent-child")
        )
    fields.setdefault("title", f"Issue {issue_id}")
    return Issue(id=issue_id, dependencies=deps, **fields)


def build_graph(*issues: Issue, include_closed: bool = True) -> IssueGraph:
    """Build an IssueGraph from the given issues."""
    return GraphBuilder(include_closed=include_closed).build(issues)


def chain(*ids: str) -> list[Issue]:
    """Issues where each id blocks the next: ids[1] depends on ids[0], etc."""
    issues = [make_issue(ids[0])]
    for previous, current in zip(ids, ids[1:]):
        issues.append(make_issue(current, [previous]))
    return issues
