"""Graph insight and snapshot diff Pydantic v2 result models."""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from src.shared.utils import now_iso


class GraphMetricEntry(BaseModel):
    """One ranked issue in a graph metric listing."""
    issue_id: str
    title: str = ""
    score: float = Field(..., ge=0.0)

    model_config = {"from_attributes": True}


class CycleInfo(BaseModel):
    """A dependency cycle (strongly connected component of size >= 2)."""
    cycle_id: int = Field(..., ge=1)
    issues: list[str]
    length: int = Field(..., ge=2)

    model_config = {"from_attributes": True}


class Insights(BaseModel):
    """Graph analytics over one project's issues."""
    timestamp: str = Field(default_factory=now_iso)
    project_path: str | None = None
    total_issues: int = Field(default=0, ge=0)
    graph_density: float = Field(default=0.0, ge=0.0)
    status_counts: dict[str, int] = Field(default_factory=dict)
    is_dag: bool = True
    connected_components: int = Field(default=0, ge=0)
    topological_order: list[str] | None = None
    bottlenecks: list[GraphMetricEntry] = Field(default_factory=list)
    keystones: list[GraphMetricEntry] = Field(default_factory=list)
    influencers: list[GraphMetricEntry] = Field(default_factory=list)
    hubs: list[GraphMetricEntry] = Field(default_factory=list)
    authorities: list[GraphMetricEntry] = Field(default_factory=list)
    cycles: list[CycleInfo] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class DiffChangeType(str, Enum):
    """How an issue changed between two snapshots."""
    NEW = "new"
    CLOSED = "closed"
    REOPENED = "reopened"
    MODIFIED = "modified"


class DiffChange(BaseModel):
    """A single issue-level change between two snapshots."""
    issue_id: str
    title: str = ""
    change_type: DiffChangeType
    changed_fields: list[str] | None = None
    previous_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None

    model_config = {"from_attributes": True}


class SnapshotDiff(BaseModel):
    """Change report between an older and a current issue snapshot."""
    timestamp: str = Field(default_factory=now_iso)
    project_path: str | None = None
    since_ref: str | None = None
    new_count: int = Field(default=0, ge=0)
    closed_count: int = Field(default=0, ge=0)
    modified_count: int = Field(default=0, ge=0)
    reopened_count: int = Field(default=0, ge=0)
    changes: list[DiffChange] = Field(default_factory=list)
    density_delta: float | None = None
    cycles_introduced: int | None = None
    cycles_resolved: int | None = None

    model_config = {"from_attributes": True}
