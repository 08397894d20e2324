"""Centrality rankings over the issue dependency graph.

All three measures read edges in the dependency direction: an edge runs
from the dependent issue to the prerequisite it waits on.

* Bottlenecks: networkx betweenness, scaled so the top node scores 1.0.
* Influencers: eigenvector-style power iteration over the symmetrized
  adjacency, scaled to 0-1.
* Hubs / authorities: HITS. Hubs depend on many well-depended-upon issues;
  authorities are depended upon by many strong hubs.

Iterative measures stop when the L2 change between rounds drops below
``tolerance`` or after ``max_iterations`` rounds, whichever comes first,
and return the current estimate either way.
"""
from __future__ import annotations

import logging
import math
from typing import Mapping

import networkx as nx

from src.graph_insights.services.graph_builder import IssueGraph
from src.shared.constants import DEFAULT_MAX_ITERATIONS, DEFAULT_TOLERANCE
from src.shared.models.insights import GraphMetricEntry

logger = logging.getLogger(__name__)


def _l2_norm(values: Mapping[str, float]) -> float:
    return math.sqrt(sum(v * v for v in values.values()))


def _l2_delta(new: Mapping[str, float], old: Mapping[str, float]) -> float:
    return math.sqrt(sum((new[k] - old[k]) ** 2 for k in new))


def _scale_to_max(values: dict[str, float]) -> dict[str, float]:
    peak = max(values.values(), default=0.0)
    if peak <= 0.0:
        return {k: 0.0 for k in values}
    return {k: v / peak for k, v in values.items()}


def rank_scores(graph: IssueGraph, scores: Mapping[str, float]) -> list[GraphMetricEntry]:
    """Sort scores descending (ties by id) into metric entries."""
    ordered = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [
        GraphMetricEntry(issue_id=node, title=graph.title(node), score=max(score, 0.0))
        for node, score in ordered
    ]


class CentralityEngine:
    """Computes bottleneck, influencer, hub and authority scores."""

    def __init__(
        self,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> None:
        self.max_iterations = max_iterations
        self.tolerance = tolerance

    # ------------------------------------------------------------------
    # Betweenness

    def betweenness(self, graph: IssueGraph) -> dict[str, float]:
        """Unnormalized directed betweenness, scaled so the top node is 1.0."""
        if len(graph) == 0:
            return {}
        raw = nx.betweenness_centrality(graph.to_networkx(), normalized=False)
        return _scale_to_max({node: float(raw[node]) for node in graph.nodes})

    # ------------------------------------------------------------------
    # Eigenvector-style influence

    def eigenvector(self, graph: IssueGraph) -> dict[str, float]:
        """Power iteration over the undirected view of the graph.

        Each round computes ``x + A.x``; the identity shift keeps bipartite
        components (stars, chains) from oscillating without changing the
        ranking. Nodes with no connections score 0.
        """
        neighbours: dict[str, tuple[str, ...]] = {}
        for node in graph.nodes:
            linked = set(graph.prerequisites(node)) | set(graph.dependents(node))
            if linked:
                neighbours[node] = tuple(sorted(linked))

        scores: dict[str, float] = dict.fromkeys(graph.nodes, 0.0)
        if not neighbours:
            return scores

        start = 1.0 / math.sqrt(len(neighbours))
        current = dict.fromkeys(neighbours, start)
        iterations = 0
        for iterations in range(1, self.max_iterations + 1):
            updated = {
                node: current[node] + sum(current[m] for m in linked)
                for node, linked in neighbours.items()
            }
            norm = _l2_norm(updated)
            updated = {node: value / norm for node, value in updated.items()}
            delta = _l2_delta(updated, current)
            current = updated
            if delta < self.tolerance:
                break
        else:
            logger.debug("Eigenvector iteration hit cap of %d", self.max_iterations)

        logger.debug("Eigenvector centrality finished after %d round(s)", iterations)
        scores.update(current)
        return _scale_to_max(scores)

    # ------------------------------------------------------------------
    # HITS

    def hits(self, graph: IssueGraph) -> tuple[dict[str, float], dict[str, float]]:
        """Return ``(hubs, authorities)`` scaled to 0-1."""
        hubs: dict[str, float] = dict.fromkeys(graph.nodes, 0.0)
        authorities: dict[str, float] = dict.fromkeys(graph.nodes, 0.0)
        if graph.edge_count == 0:
            return hubs, authorities

        start = 1.0 / math.sqrt(len(graph))
        hubs = dict.fromkeys(graph.nodes, start)
        authorities = dict.fromkeys(graph.nodes, start)
        iterations = 0
        for iterations in range(1, self.max_iterations + 1):
            new_auth = {
                node: sum(hubs[m] for m in graph.dependents(node)) for node in graph.nodes
            }
            auth_norm = _l2_norm(new_auth)
            new_auth = {node: value / auth_norm for node, value in new_auth.items()}

            new_hubs = {
                node: sum(new_auth[m] for m in graph.prerequisites(node))
                for node in graph.nodes
            }
            hub_norm = _l2_norm(new_hubs)
            new_hubs = {node: value / hub_norm for node, value in new_hubs.items()}

            delta = max(_l2_delta(new_hubs, hubs), _l2_delta(new_auth, authorities))
            hubs, authorities = new_hubs, new_auth
            if delta < self.tolerance:
                break
        else:
            logger.debug("HITS iteration hit cap of %d", self.max_iterations)

        logger.debug("HITS finished after %d round(s)", iterations)
        return _scale_to_max(hubs), _scale_to_max(authorities)

    # ------------------------------------------------------------------
    # Ranked views

    def rank_bottlenecks(self, graph: IssueGraph) -> list[GraphMetricEntry]:
        return rank_scores(graph, self.betweenness(graph))

    def rank_influencers(self, graph: IssueGraph) -> list[GraphMetricEntry]:
        return rank_scores(graph, self.eigenvector(graph))

    def rank_hits(
        self, graph: IssueGraph
    ) -> tuple[list[GraphMetricEntry], list[GraphMetricEntry]]:
        """Return ``(hubs, authorities)`` as ranked entry lists."""
        hubs, authorities = self.hits(graph)
        return rank_scores(graph, hubs), rank_scores(graph, authorities)
