"""Issue tracker Pydantic v2 data models."""
from __future__ import annotations

import math
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator, model_validator

from src.shared.constants import DEFAULT_PRIORITY, MAX_PRIORITY, MIN_PRIORITY


class IssueStatus(str, Enum):
    """Lifecycle states of a tracked issue."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DEFERRED = "deferred"
    CLOSED = "closed"
    PINNED = "pinned"


class IssueType(str, Enum):
    """Kinds of tracked issue."""
    BUG = "bug"
    FEATURE = "feature"
    TASK = "task"
    EPIC = "epic"
    CHORE = "chore"


class DependencyType(str, Enum):
    """Kinds of dependency edge."""
    BLOCKS = "blocks"
    PARENT_CHILD = "parent-child"


# Statuses that count as "still being worked" for snapshot comparisons.
ACTIVE_STATUSES: frozenset[str] = frozenset(
    {IssueStatus.OPEN.value, IssueStatus.IN_PROGRESS.value, IssueStatus.BLOCKED.value}
)


def _identifier(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (str, int)):
        return str(value)
    return ""


def _optional_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class DependencyEdge(BaseModel):
    """A dependency of ``issue_id`` on ``depends_on_id``.

    For ``blocks`` edges, ``issue_id`` cannot proceed until ``depends_on_id``
    is resolved. For ``parent-child`` edges, ``issue_id`` is a child of the
    epic ``depends_on_id``. Any unrecognised type is treated as blocking.
    An empty endpoint marks an edge the graph builder ignores.
    """
    issue_id: str = ""
    depends_on_id: str = ""
    type: str = DependencyType.BLOCKS.value
    created_at: str | None = None
    created_by: str | None = None

    model_config = {"from_attributes": True, "extra": "ignore"}

    @field_validator("issue_id", "depends_on_id", mode="before")
    @classmethod
    def coerce_endpoint(cls, value: Any) -> str:
        return _identifier(value)

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, value: Any) -> str:
        if isinstance(value, str) and value:
            return value
        return DependencyType.BLOCKS.value

    @field_validator("created_at", "created_by", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str | None:
        return _optional_text(value)

    @property
    def is_parent_child(self) -> bool:
        return self.type == DependencyType.PARENT_CHILD.value


class Issue(BaseModel):
    """A single issue as supplied by the external store.

    Only ``id`` is required. Any other field that is missing, null or
    unusable takes its default, so one malformed field never discards the
    issue; ``priority`` is clamped onto the 0-4 scale.

    Status and type are kept as plain strings so that values outside the
    known vocabularies survive a round trip; compare them against
    :class:`IssueStatus` / :class:`IssueType` members.
    """
    id: str = Field(..., min_length=1)
    title: str = ""
    description: str | None = None
    status: str = IssueStatus.OPEN.value
    priority: int = Field(default=DEFAULT_PRIORITY, ge=MIN_PRIORITY, le=MAX_PRIORITY)
    issue_type: str = IssueType.TASK.value
    owner: str | None = None
    parent: str | None = None
    story_points: float | None = None
    labels: list[str] = Field(default_factory=list)
    dependencies: list[DependencyEdge] = Field(default_factory=list)
    created_at: str | None = None
    created_by: str | None = None
    updated_at: str | None = None
    closed_at: str | None = None
    close_reason: str | None = None
    notes: str | None = None

    model_config = {"from_attributes": True, "extra": "ignore"}

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, value: Any) -> str:
        return _optional_text(value) or ""

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> str:
        if isinstance(value, IssueStatus):
            return value.value
        if isinstance(value, str) and value:
            return value
        return IssueStatus.OPEN.value

    @field_validator("issue_type", mode="before")
    @classmethod
    def default_issue_type(cls, value: Any) -> str:
        if isinstance(value, IssueType):
            return value.value
        if isinstance(value, str) and value:
            return value
        return IssueType.TASK.value

    @field_validator("priority", mode="before")
    @classmethod
    def clamp_priority(cls, value: Any) -> int:
        if value is None or isinstance(value, bool):
            return DEFAULT_PRIORITY
        try:
            number = int(value)
        except (TypeError, ValueError, OverflowError):
            return DEFAULT_PRIORITY
        return min(max(number, MIN_PRIORITY), MAX_PRIORITY)

    @field_validator("story_points", mode="before")
    @classmethod
    def coerce_story_points(cls, value: Any) -> float | None:
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None

    @field_validator(
        "description",
        "owner",
        "parent",
        "created_at",
        "created_by",
        "updated_at",
        "closed_at",
        "close_reason",
        "notes",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, value: Any) -> str | None:
        return _optional_text(value)

    @field_validator("labels", mode="before")
    @classmethod
    def coerce_labels(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple, set, frozenset)):
            return []
        return [label for label in (_optional_text(v) for v in value) if label]

    @field_validator("dependencies", mode="before")
    @classmethod
    def coerce_dependencies(cls, value: Any) -> list[Any]:
        if not isinstance(value, (list, tuple)):
            return []
        return [dep for dep in value if isinstance(dep, (Mapping, DependencyEdge))]

    @model_validator(mode="after")
    def own_dependencies(self) -> Issue:
        # Edges listed without an issue_id belong to the issue carrying them.
        for dep in self.dependencies:
            if not dep.issue_id:
                dep.issue_id = self.id
        return self

    @property
    def is_closed(self) -> bool:
        return self.status == IssueStatus.CLOSED.value

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
