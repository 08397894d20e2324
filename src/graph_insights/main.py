"""Graph insights engine: configuration, logging and service wiring."""
from __future__ import annotations

from typing import Any, Iterable

from src.graph_insights.services.adapters import normalize_diff, normalize_insights
from src.graph_insights.services.insights_aggregator import InsightsAggregator
from src.graph_insights.services.snapshot_differ import SnapshotDiffer
from src.shared.config import InsightsConfig
from src.shared.constants import INSIGHTS_SERVICE_NAME, VERSION
from src.shared.logging import setup_logging
from src.shared.models.insights import Insights, SnapshotDiff

# Every module logger under this package inherits the JSON handler.
LOGGER_NAME = "src.graph_insights"


class GraphInsightsEngine:
    """Entry point holding one configured aggregator and differ.

    Construction configures structured logging for the package at the
    configured ``log_level``.
    """

    def __init__(self, config: InsightsConfig | None = None) -> None:
        self.config = config or InsightsConfig()
        self.logger = setup_logging(
            INSIGHTS_SERVICE_NAME, self.config.log_level, logger_name=LOGGER_NAME
        )
        self.aggregator = InsightsAggregator(self.config)
        self.differ = SnapshotDiffer(self.config)
        self.logger.info(
            "Engine started: name=%s version=%s top_n=%d include_closed=%s",
            INSIGHTS_SERVICE_NAME,
            VERSION,
            self.config.top_n,
            self.config.include_closed,
        )

    def insights(self, issues: Iterable[Any], project_path: str | None = None) -> Insights:
        return self.aggregator.aggregate(issues, project_path=project_path)

    def diff(
        self,
        old: Iterable[Any],
        current: Iterable[Any],
        since_ref: str | None = None,
        project_path: str | None = None,
    ) -> SnapshotDiff:
        return self.differ.diff(old, current, since_ref=since_ref, project_path=project_path)

    def normalize_insights(self, raw: Any, project_path: str | None = None) -> Insights:
        return normalize_insights(raw, project_path=project_path)

    def normalize_diff(
        self,
        raw: Any,
        project_path: str | None = None,
        since_ref: str | None = None,
    ) -> SnapshotDiff:
        return normalize_diff(raw, project_path=project_path, since_ref=since_ref)
