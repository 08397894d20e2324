"""Keystone ranking: how much work does resolving an issue unblock?"""
from __future__ import annotations

from collections import deque

from src.graph_insights.services.graph_builder import IssueGraph
from src.shared.models.insights import GraphMetricEntry


def reachable_from(graph: IssueGraph, issue_id: str) -> set[str]:
    """Return every issue transitively waiting on *issue_id*.

    Follows dependents breadth-first with a seen-set, so cycles terminate.
    The start node is never included, even when it sits on a cycle.
    """
    if issue_id not in graph:
        return set()
    seen: set[str] = {issue_id}
    queue: deque[str] = deque([issue_id])
    while queue:
        current = queue.popleft()
        for dependent in graph.dependents(current):
            if dependent not in seen:
                seen.add(dependent)
                queue.append(dependent)
    seen.discard(issue_id)
    return seen


class KeystoneEngine:
    """Ranks issues by the size of their transitive dependent set."""

    def scores(self, graph: IssueGraph) -> dict[str, int]:
        return {node: len(reachable_from(graph, node)) for node in graph.nodes}

    def rank(self, graph: IssueGraph) -> list[GraphMetricEntry]:
        """Return every node ranked by raw reachable count, ties by id."""
        ranked = sorted(self.scores(graph).items(), key=lambda item: (-item[1], item[0]))
        return [
            GraphMetricEntry(issue_id=node, title=graph.title(node), score=float(score))
            for node, score in ranked
        ]
