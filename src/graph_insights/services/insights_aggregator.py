"""Compose every graph metric into a single Insights record."""
from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Any, Iterable, Sequence

import networkx as nx

from src.graph_insights.services.centrality import CentralityEngine
from src.graph_insights.services.cycle_detector import CycleDetector
from src.graph_insights.services.density import compute_density
from src.graph_insights.services.graph_builder import GraphBuilder, IssueGraph
from src.graph_insights.services.issue_loader import parse_issue_records
from src.graph_insights.services.keystones import KeystoneEngine
from src.shared.config import InsightsConfig
from src.shared.logging import trace_context, trace_id_var
from src.shared.models.insights import GraphMetricEntry, Insights
from src.shared.models.issues import Issue
from src.shared.utils import elapsed_ms

logger = logging.getLogger(__name__)


def top_entries(entries: Iterable[GraphMetricEntry], limit: int) -> list[GraphMetricEntry]:
    """Keep the *limit* highest positive scores, ties broken by id."""
    positive = [entry for entry in entries if entry.score > 0.0]
    positive.sort(key=lambda entry: (-entry.score, entry.issue_id))
    return positive[:limit]


class InsightsAggregator:
    """Builds the issue graph once and runs every analytic over it.

    The components are independent read-only consumers of the same
    :class:`IssueGraph`; nothing is cached between calls.
    """

    def __init__(self, config: InsightsConfig | None = None) -> None:
        self.config = config or InsightsConfig()
        self._builder = GraphBuilder(include_closed=self.config.include_closed)
        self._cycles = CycleDetector()
        self._keystones = KeystoneEngine()
        self._centrality = CentralityEngine(
            max_iterations=self.config.max_iterations,
            tolerance=self.config.tolerance,
        )

    def aggregate(
        self,
        issues: Iterable[Any],
        project_path: str | None = None,
    ) -> Insights:
        """Compute insights for a sequence of issues or raw issue records.

        ``total_issues`` and ``status_counts`` cover every parsed issue,
        including closed ones the live graph leaves out.
        """
        with trace_context(trace_id_var.get() or None):
            parsed = parse_issue_records(issues)
            graph = self._timed("graph", self._builder.build, parsed)
            insights = self.from_graph(graph, project_path=project_path, issues=parsed)
            logger.info(
                "Computed insights for %d issues (%d in graph, %d cycles)",
                insights.total_issues,
                len(graph),
                len(insights.cycles),
            )
            return insights

    def from_graph(
        self,
        graph: IssueGraph,
        project_path: str | None = None,
        issues: Sequence[Issue] | None = None,
    ) -> Insights:
        """Compute insights for an already-built graph.

        ``total_issues`` and ``status_counts`` describe *issues* when given,
        otherwise the graph's nodes.
        """
        if issues is None:
            statuses = [graph.statuses[node] for node in graph.nodes]
        else:
            statuses = [issue.status for issue in issues]

        limit = self.config.top_n
        density = self._timed("density", compute_density, graph)
        cycles = self._timed("cycles", self._cycles.detect, graph)
        keystones = self._timed("keystones", self._keystones.rank, graph)
        bottlenecks = self._timed("bottlenecks", self._centrality.rank_bottlenecks, graph)
        influencers = self._timed("influencers", self._centrality.rank_influencers, graph)
        hubs, authorities = self._timed("hits", self._centrality.rank_hits, graph)

        nx_graph = graph.to_networkx()
        is_dag = not cycles
        topological_order: list[str] | None = None
        if is_dag:
            # Prerequisites before the issues that wait on them.
            topological_order = list(
                nx.lexicographical_topological_sort(nx_graph.reverse(copy=False))
            )

        return Insights(
            project_path=project_path,
            total_issues=len(statuses),
            graph_density=density,
            status_counts=dict(Counter(statuses)),
            is_dag=is_dag,
            connected_components=nx.number_weakly_connected_components(nx_graph),
            topological_order=topological_order,
            bottlenecks=top_entries(bottlenecks, limit),
            keystones=top_entries(keystones, limit),
            influencers=top_entries(influencers, limit),
            hubs=top_entries(hubs, limit),
            authorities=top_entries(authorities, limit),
            cycles=cycles,
        )

    @staticmethod
    def _timed(label: str, func: Any, *args: Any) -> Any:
        started = time.perf_counter()
        result = func(*args)
        logger.debug("%s computed in %.2f ms", label, elapsed_ms(started))
        return result
