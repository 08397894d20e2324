"""Graph analytics and snapshot diff services for issue trackers."""

from src.graph_insights.services.graph_builder import GraphBuilder, IssueGraph
from src.graph_insights.services.density import compute_density
from src.graph_insights.services.cycle_detector import CycleDetector
from src.graph_insights.services.keystones import KeystoneEngine, reachable_from
from src.graph_insights.services.centrality import CentralityEngine
from src.graph_insights.services.insights_aggregator import InsightsAggregator
from src.graph_insights.services.snapshot_differ import SnapshotDiffer
from src.graph_insights.services.issue_loader import (
    parse_issue_records,
    parse_issues_jsonl,
)
from src.graph_insights.services.adapters import normalize_diff, normalize_insights

__all__ = [
    "GraphBuilder",
    "IssueGraph",
    "compute_density",
    "CycleDetector",
    "KeystoneEngine",
    "reachable_from",
    "CentralityEngine",
    "InsightsAggregator",
    "SnapshotDiffer",
    "parse_issue_records",
    "parse_issues_jsonl",
    "normalize_diff",
    "normalize_insights",
]
