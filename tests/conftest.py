"""Shared test fixtures for the graph insights test suite."""
from __future__ import annotations

from typing import Callable

import pytest

from src.shared.models.issues import Issue
from tests.fixtures import make_issue


@pytest.fixture
def issue_factory() -> Callable[..., Issue]:
    """Provide the make_issue factory."""
    return make_issue


@pytest.fixture
def project_issues() -> list[Issue]:
    """Eight issues with five blocking dependencies.

    TEST-003, TEST-004 and TEST-007 depend on TEST-001; TEST-002 and
    TEST-007 depend on TEST-006. TEST-005 is closed, TEST-008 deferred.
    """
    return [
        make_issue(
            "TEST-001",
            title="Implement user authentication",
            status="open",
            priority=1,
            issue_type="feature",
            owner="alice@example.com",
            created_at="2026-01-01T00:00:00Z",
            updated_at="2026-01-10T00:00:00Z",
        ),
        make_issue(
            "TEST-002",
            ["TEST-006"],
            title="Fix login redirect loop",
            status="in_progress",
            priority=0,
            issue_type="bug",
            owner="bob@example.com",
            created_at="2026-01-02T00:00:00Z",
            updated_at="2026-01-11T00:00:00Z",
        ),
        make_issue(
            "TEST-003",
            ["TEST-001"],
            title="Add password reset flow",
            status="blocked",
            priority=2,
            issue_type="feature",
            owner="alice@example.com",
            created_at="2026-01-03T00:00:00Z",
            updated_at="2026-01-12T00:00:00Z",
        ),
        make_issue(
            "TEST-004",
            ["TEST-001"],
            title="Write auth unit tests",
            status="open",
            priority=2,
            issue_type="task",
            owner="charlie@example.com",
            created_at="2026-01-04T00:00:00Z",
            updated_at="2026-01-13T00:00:00Z",
        ),
        make_issue(
            "TEST-005",
            title="Set up CI pipeline",
            status="closed",
            priority=1,
            issue_type="task",
            owner="bob@example.com",
            created_at="2026-01-05T00:00:00Z",
            updated_at="2026-01-14T00:00:00Z",
            closed_at="2026-01-14T00:00:00Z",
        ),
        make_issue(
            "TEST-006",
            title="Database schema migration",
            status="open",
            priority=1,
            issue_type="task",
            owner="alice@example.com",
            created_at="2026-01-06T00:00:00Z",
            updated_at="2026-01-15T00:00:00Z",
        ),
        make_issue(
            "TEST-007",
            ["TEST-001", "TEST-006"],
            title="Rate limiting middleware",
            status="open",
            priority=3,
            issue_type="feature",
            owner="charlie@example.com",
            created_at="2026-01-07T00:00:00Z",
            updated_at="2026-01-16T00:00:00Z",
        ),
        make_issue(
            "TEST-008",
            title="OAuth2 Google integration",
            status="deferred",
            priority=4,
            issue_type="feature",
            owner="",
            created_at="2026-01-08T00:00:00Z",
            updated_at="2026-01-17T00:00:00Z",
        ),
    ]
