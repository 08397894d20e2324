"""Dependency cycle detection via Tarjan's strongly connected components."""
from __future__ import annotations

import logging

from src.graph_insights.services.graph_builder import IssueGraph
from src.shared.models.insights import CycleInfo

logger = logging.getLogger(__name__)


class CycleDetector:
    """Finds dependency cycles in an :class:`IssueGraph`.

    Tarjan's algorithm runs on an explicit stack of ``(node, next child
    index)`` frames so that arbitrarily deep graphs never hit the
    interpreter's recursion limit.
    """

    def strongly_connected_components(self, graph: IssueGraph) -> list[list[str]]:
        """Return every SCC (including singletons) in completion order.

        Members of each component are listed in discovery order.
        """
        index_of: dict[str, int] = {}
        lowlink: dict[str, int] = {}
        on_stack: set[str] = set()
        stack: list[str] = []
        components: list[list[str]] = []
        counter = 0

        for root in graph.nodes:
            if root in index_of:
                continue
            index_of[root] = lowlink[root] = counter
            counter += 1
            stack.append(root)
            on_stack.add(root)
            work: list[tuple[str, int]] = [(root, 0)]

            while work:
                node, child_index = work[-1]
                children = graph.dependents(node)
                if child_index < len(children):
                    work[-1] = (node, child_index + 1)
                    child = children[child_index]
                    if child not in index_of:
                        index_of[child] = lowlink[child] = counter
                        counter += 1
                        stack.append(child)
                        on_stack.add(child)
                        work.append((child, 0))
                    elif child in on_stack:
                        lowlink[node] = min(lowlink[node], index_of[child])
                    continue

                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])

                if lowlink[node] == index_of[node]:
                    component: list[str] = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node:
                            break
                    component.reverse()
                    components.append(component)

        return components

    def detect(self, graph: IssueGraph) -> list[CycleInfo]:
        """Return one :class:`CycleInfo` per SCC of size two or more."""
        cycles: list[CycleInfo] = []
        for component in self.strongly_connected_components(graph):
            if len(component) < 2:
                continue
            cycles.append(
                CycleInfo(
                    cycle_id=len(cycles) + 1,
                    issues=component,
                    length=len(component),
                )
            )
        if cycles:
            logger.info("Detected %d dependency cycle(s)", len(cycles))
        return cycles
