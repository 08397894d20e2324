"""Directed graph fill ratio."""
from __future__ import annotations

from src.graph_insights.services.graph_builder import IssueGraph


def compute_density(graph: IssueGraph) -> float:
    """Return |E| / (V * (V - 1)) over resolved blocking edges.

    Graphs with fewer than two nodes have density 0.0.
    """
    node_count = len(graph)
    if node_count < 2:
        return 0.0
    return graph.edge_count / (node_count * (node_count - 1))
