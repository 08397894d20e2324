"""Normalize externally produced insight/diff payloads.

External analysers emit the same information in several shapes
(PascalCase "robot" output, an enveloped diff, or already-canonical
snake_case records). Each payload is first classified into a tagged
variant, then mapped by the matching handler into the canonical
:class:`Insights` / :class:`SnapshotDiff` models.
"""
from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Callable, Mapping

from pydantic import ValidationError as ModelValidationError

from src.shared.errors import ParsingError, ValidationError
from src.shared.models.insights import (
    CycleInfo,
    DiffChange,
    DiffChangeType,
    GraphMetricEntry,
    Insights,
    SnapshotDiff,
)

logger = logging.getLogger(__name__)


class InsightsShape(str, Enum):
    """Recognised insight payload variants."""
    CANONICAL = "canonical"
    ROBOT = "robot"


class DiffShape(str, Enum):
    """Recognised diff payload variants."""
    CANONICAL = "canonical"
    ENVELOPE = "envelope"
    EMPTY = "empty"


def _first(entry: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return value
    return default


def _require_mapping(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise ParsingError(f"{what} payload must be an object, got {type(raw).__name__}")
    return raw


# ----------------------------------------------------------------------
# Insights


def classify_insights_payload(raw: Any) -> InsightsShape:
    payload = _require_mapping(raw, "Insights")
    if all(key in payload for key in ("bottlenecks", "keystones", "total_issues")):
        return InsightsShape.CANONICAL
    return InsightsShape.ROBOT


def _metric_entries(items: Any) -> list[GraphMetricEntry]:
    if not isinstance(items, list):
        return []
    entries: list[GraphMetricEntry] = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        issue_id = str(_first(item, "ID", "id", "issue_id", default=""))
        entries.append(
            GraphMetricEntry(
                issue_id=issue_id,
                title=str(_first(item, "Title", "title", default=issue_id)),
                score=_score(_first(item, "Value", "value", "score", default=0)),
            )
        )
    return entries


def _score(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(score):
        return 0.0
    return max(score, 0.0)


def _cycle_id(value: Any, fallback: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 1:
        return value
    return fallback


def _cycles(items: Any) -> list[CycleInfo]:
    if not isinstance(items, list):
        return []
    cycles: list[CycleInfo] = []
    for index, item in enumerate(items, start=1):
        if isinstance(item, list):
            members = [str(member) for member in item]
            cycle_id = index
        elif isinstance(item, Mapping):
            raw_members = _first(item, "issues", "Issues", default=[])
            if not isinstance(raw_members, list):
                raw_members = []
            members = [str(m) for m in raw_members]
            cycle_id = _cycle_id(_first(item, "cycle_id", "CycleID"), index)
        else:
            continue
        if len(members) < 2:
            logger.debug("Dropping external cycle %s with %d member(s)", index, len(members))
            continue
        cycles.append(CycleInfo(cycle_id=cycle_id, issues=members, length=len(members)))
    return cycles


def _invalid(what: str, exc: ModelValidationError) -> ValidationError:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "payload"
    return ValidationError(
        f"{what} payload has {exc.error_count()} invalid field(s); "
        f"first at {location}: {first['msg']}"
    )


def _insights_from_canonical(raw: Mapping[str, Any], project_path: str | None) -> Insights:
    insights = Insights.model_validate(dict(raw))
    if project_path is not None:
        insights.project_path = project_path
    return insights


def _insights_from_robot(raw: Mapping[str, Any], project_path: str | None) -> Insights:
    stats = _first(raw, "Stats", "full_stats", default={})
    if not isinstance(stats, Mapping):
        stats = {}
    density = _first(raw, "ClusterDensity", default=None)
    if density is None:
        density = _first(stats, "graph_density", "GraphDensity", default=0.0)
    if not isinstance(density, (int, float)) or density < 0:
        density = 0.0

    fields: dict[str, Any] = {
        "project_path": project_path,
        "total_issues": _first(stats, "total_issues", "TotalIssues", "Total", default=0),
        "graph_density": float(density),
        "bottlenecks": _metric_entries(_first(raw, "Bottlenecks", "bottlenecks")),
        "keystones": _metric_entries(_first(raw, "Keystones", "keystones")),
        "influencers": _metric_entries(_first(raw, "Influencers", "influencers")),
        "hubs": _metric_entries(_first(raw, "Hubs", "hubs")),
        "authorities": _metric_entries(_first(raw, "Authorities", "authorities")),
        "cycles": _cycles(_first(raw, "Cycles", "cycles")),
    }
    fields["is_dag"] = not fields["cycles"]
    if raw.get("generated_at"):
        fields["timestamp"] = raw["generated_at"]
    return Insights(**fields)


_INSIGHTS_HANDLERS: dict[InsightsShape, Callable[[Mapping[str, Any], str | None], Insights]] = {
    InsightsShape.CANONICAL: _insights_from_canonical,
    InsightsShape.ROBOT: _insights_from_robot,
}


def normalize_insights(raw: Any, project_path: str | None = None) -> Insights:
    """Map any supported insights payload onto :class:`Insights`."""
    shape = classify_insights_payload(raw)
    logger.debug("Normalizing insights payload of shape %s", shape.value)
    try:
        return _INSIGHTS_HANDLERS[shape](raw, project_path)
    except ModelValidationError as exc:
        raise _invalid("Insights", exc) from exc


# ----------------------------------------------------------------------
# Diff


def classify_diff_payload(raw: Any) -> DiffShape:
    payload = _require_mapping(raw, "Diff")
    if isinstance(payload.get("changes"), list):
        return DiffShape.CANONICAL
    if isinstance(payload.get("diff"), Mapping):
        return DiffShape.ENVELOPE
    return DiffShape.EMPTY


def _diff_from_canonical(
    raw: Mapping[str, Any], project_path: str | None, since_ref: str | None
) -> SnapshotDiff:
    data = dict(raw)
    if project_path is not None:
        data["project_path"] = project_path
    if since_ref is not None and not data.get("since_ref"):
        data["since_ref"] = since_ref
    return SnapshotDiff.model_validate(data)


def _change(entry: Any, change_type: DiffChangeType) -> DiffChange | None:
    if not isinstance(entry, Mapping):
        return None
    issue_id = str(_first(entry, "id", "ID", "issue_id", default=""))
    fields: dict[str, Any] = {
        "issue_id": issue_id,
        "title": str(_first(entry, "title", "Title", default=issue_id)),
        "change_type": change_type,
    }
    if change_type is DiffChangeType.MODIFIED:
        fields["changed_fields"] = entry.get("changed_fields")
        fields["previous_values"] = entry.get("previous_values")
        fields["new_values"] = entry.get("new_values")
    return DiffChange(**fields)


def _diff_from_envelope(
    raw: Mapping[str, Any], project_path: str | None, since_ref: str | None
) -> SnapshotDiff:
    diff = raw["diff"]
    buckets = {
        DiffChangeType.NEW: diff.get("new_issues") or [],
        DiffChangeType.CLOSED: diff.get("closed_issues") or [],
        DiffChangeType.MODIFIED: diff.get("modified_issues") or [],
        DiffChangeType.REOPENED: diff.get("reopened_issues") or [],
    }
    changes: list[DiffChange] = []
    counts: dict[DiffChangeType, int] = {}
    for change_type, entries in buckets.items():
        mapped = [c for c in (_change(e, change_type) for e in entries) if c is not None]
        counts[change_type] = len(mapped)
        changes.extend(mapped)

    metric_deltas = diff.get("metric_deltas")
    density_delta = None
    if isinstance(metric_deltas, Mapping):
        density_delta = _first(metric_deltas, "graph_density", "density_delta")

    fields: dict[str, Any] = {
        "project_path": project_path,
        "since_ref": since_ref,
        "new_count": counts[DiffChangeType.NEW],
        "closed_count": counts[DiffChangeType.CLOSED],
        "modified_count": counts[DiffChangeType.MODIFIED],
        "reopened_count": counts[DiffChangeType.REOPENED],
        "changes": changes,
        "density_delta": density_delta,
        "cycles_introduced": len(diff.get("new_cycles") or []),
        "cycles_resolved": len(diff.get("resolved_cycles") or []),
    }
    timestamp = raw.get("generated_at") or diff.get("to_timestamp")
    if timestamp:
        fields["timestamp"] = timestamp
    return SnapshotDiff(**fields)


def _diff_from_empty(
    raw: Mapping[str, Any], project_path: str | None, since_ref: str | None
) -> SnapshotDiff:
    logger.warning("Diff payload has no recognisable changes; returning empty diff")
    fields: dict[str, Any] = {"project_path": project_path, "since_ref": since_ref}
    if raw.get("generated_at"):
        fields["timestamp"] = raw["generated_at"]
    return SnapshotDiff(**fields)


_DIFF_HANDLERS: dict[
    DiffShape, Callable[[Mapping[str, Any], str | None, str | None], SnapshotDiff]
] = {
    DiffShape.CANONICAL: _diff_from_canonical,
    DiffShape.ENVELOPE: _diff_from_envelope,
    DiffShape.EMPTY: _diff_from_empty,
}


def normalize_diff(
    raw: Any,
    project_path: str | None = None,
    since_ref: str | None = None,
) -> SnapshotDiff:
    """Map any supported diff payload onto :class:`SnapshotDiff`."""
    shape = classify_diff_payload(raw)
    logger.debug("Normalizing diff payload of shape %s", shape.value)
    try:
        return _DIFF_HANDLERS[shape](raw, project_path, since_ref)
    except ModelValidationError as exc:
        raise _invalid("Diff", exc) from exc
