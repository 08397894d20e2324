"""Issue dependency graph construction."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Iterator

import networkx as nx

from src.shared.models.issues import Issue, IssueStatus

logger = logging.getLogger(__name__)


class IssueGraph:
    """Adjacency view over one snapshot of issues.

    ``blocked_by[x]`` holds the ids ``x`` depends on and ``blocks[y]`` the
    ids that depend on ``y``. Both may mention ids that are not nodes
    (unresolved references); the traversal views :meth:`prerequisites` and
    :meth:`dependents` only ever yield known nodes, in sorted order.
    """

    def __init__(
        self,
        nodes: Iterable[str],
        blocked_by: dict[str, set[str]],
        blocks: dict[str, set[str]],
        parent_of: dict[str, str],
        titles: dict[str, str],
        statuses: dict[str, str],
    ) -> None:
        self.nodes: tuple[str, ...] = tuple(nodes)
        self.node_set: frozenset[str] = frozenset(self.nodes)
        self.blocked_by = blocked_by
        self.blocks = blocks
        self.parent_of = parent_of
        self.titles = titles
        self.statuses = statuses

        self._prerequisites: dict[str, tuple[str, ...]] = {}
        self._dependents: dict[str, tuple[str, ...]] = {}
        for node in self.nodes:
            self._prerequisites[node] = tuple(
                sorted(t for t in blocked_by.get(node, ()) if t in self.node_set)
            )
            self._dependents[node] = tuple(
                sorted(s for s in blocks.get(node, ()) if s in self.node_set)
            )

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, issue_id: object) -> bool:
        return issue_id in self.node_set

    def prerequisites(self, issue_id: str) -> tuple[str, ...]:
        """Known issues that *issue_id* depends on."""
        return self._prerequisites.get(issue_id, ())

    def dependents(self, issue_id: str) -> tuple[str, ...]:
        """Known issues that depend on *issue_id*."""
        return self._dependents.get(issue_id, ())

    def edges(self) -> Iterator[tuple[str, str]]:
        """Yield resolved ``(dependent, prerequisite)`` pairs."""
        for node in self.nodes:
            for target in self._prerequisites[node]:
                yield node, target

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._prerequisites.values())

    def unresolved_edges(self) -> list[tuple[str, str]]:
        """Return ``(issue_id, depends_on_id)`` pairs touching unknown ids."""
        unresolved = [
            (source, target)
            for source, targets in self.blocked_by.items()
            for target in targets
            if source not in self.node_set or target not in self.node_set
        ]
        return sorted(unresolved)

    def title(self, issue_id: str) -> str:
        return self.titles.get(issue_id, issue_id)

    def to_networkx(self) -> nx.DiGraph:
        """Export the resolved graph as a DiGraph (dependent -> prerequisite)."""
        graph = nx.DiGraph()
        for node in self.nodes:
            graph.add_node(
                node, title=self.titles.get(node, ""), status=self.statuses.get(node)
            )
        graph.add_edges_from(self.edges())
        return graph


class GraphBuilder:
    """Builds an :class:`IssueGraph` from issues and their dependency lists.

    With ``include_closed=False`` closed issues are left out of the node set,
    which yields the "live" graph; their edges are kept as unresolved
    references.
    """

    def __init__(self, include_closed: bool = True) -> None:
        self._include_closed = include_closed

    def build(self, issues: Iterable[Issue]) -> IssueGraph:
        """Build the graph in a single pass over issues and edges."""
        nodes: dict[str, None] = {}
        titles: dict[str, str] = {}
        statuses: dict[str, str] = {}
        blocked_by: dict[str, set[str]] = defaultdict(set)
        blocks: dict[str, set[str]] = defaultdict(set)
        parent_of: dict[str, str] = {}
        skipped_closed = 0

        for issue in issues:
            # Titles cover closed issues too, for display of unresolved refs.
            titles[issue.id] = issue.title
            statuses[issue.id] = issue.status
            if not self._include_closed and issue.status == IssueStatus.CLOSED.value:
                skipped_closed += 1
            else:
                nodes[issue.id] = None

            for dep in issue.dependencies:
                child, target = dep.issue_id, dep.depends_on_id
                if not child or not target or child == target:
                    continue
                if dep.is_parent_child:
                    parent_of[child] = target
                else:
                    blocked_by[child].add(target)
                    blocks[target].add(child)

        graph = IssueGraph(
            nodes=nodes,
            blocked_by=dict(blocked_by),
            blocks=dict(blocks),
            parent_of=parent_of,
            titles=titles,
            statuses=statuses,
        )
        logger.debug(
            "Built issue graph: %d nodes, %d edges, %d closed skipped",
            len(graph),
            graph.edge_count,
            skipped_closed,
        )
        return graph
