"""
dependencies/cycles.py - Cycle Detector

Finds strongly connected components with Tarjan's algorithm (one DFS pass,
O(F+E)); every component with more than one feature is reported as a cycle
together with a severity and the edge whose removal is cheapest.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Collection, Dict, FrozenSet, List, Optional, Set, Tuple
import logging

from featuregraph.core.enums import CycleSeverity, DependencyStrength

from .graph import FeatureGraph

logger = logging.getLogger(__name__)


# =============================================================================
# CYCLE REPORT
# =============================================================================

@dataclass(frozen=True)
class CycleReport:
    """A detected dependency cycle (strongly connected component of size > 1)."""
    cycle: List[str]
    severity: CycleSeverity
    suggested_break_edge: Tuple[str, str]
    breaks_component: bool = True

    @property
    def size(self) -> int:
        return len(self.cycle)

    @property
    def features(self) -> FrozenSet[str]:
        return frozenset(self.cycle)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle": list(self.cycle),
            "severity": self.severity.value,
            "suggested_break_edge": list(self.suggested_break_edge),
            "breaks_component": self.breaks_component,
        }


# =============================================================================
# TARJAN SCC
# =============================================================================

def strongly_connected_components(
    graph: FeatureGraph,
    strengths: Optional[Collection[DependencyStrength]] = None,
) -> List[List[int]]:
    """
    All strongly connected components, as lists of node indices.

    Iterative Tarjan: roots are taken in index order and successors in edge
    input order, so the result is reproducible for a given input order.

    Args:
        graph: Feature graph
        strengths: Only traverse edges of these strengths (None = all)
    """
    n = len(graph)
    successors = [graph.successors(i, strengths) for i in range(n)]

    disc = [-1] * n
    low = [0] * n
    on_stack = [False] * n
    stack: List[int] = []
    components: List[List[int]] = []
    counter = 0

    for root in range(n):
        if disc[root] != -1:
            continue

        disc[root] = low[root] = counter
        counter += 1
        stack.append(root)
        on_stack[root] = True
        work: List[Tuple[int, int]] = [(root, 0)]

        while work:
            node, pos = work[-1]
            if pos < len(successors[node]):
                work[-1] = (node, pos + 1)
                nxt = successors[node][pos]
                if disc[nxt] == -1:
                    disc[nxt] = low[nxt] = counter
                    counter += 1
                    stack.append(nxt)
                    on_stack[nxt] = True
                    work.append((nxt, 0))
                elif on_stack[nxt]:
                    low[node] = min(low[node], disc[nxt])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                low[parent] = min(low[parent], low[node])

            if low[node] == disc[node]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack[member] = False
                    component.append(member)
                    if member == node:
                        break
                components.append(component)

    return components


def cyclic_components(
    graph: FeatureGraph,
    strengths: Optional[Collection[DependencyStrength]] = None,
) -> List[List[int]]:
    """Components of size > 1, each sorted, ordered by lowest member index."""
    cycles = [sorted(c) for c in strongly_connected_components(graph, strengths) if len(c) > 1]
    cycles.sort(key=lambda c: c[0])
    return cycles


# =============================================================================
# REPORT HELPERS
# =============================================================================

def _discovery_order(
    graph: FeatureGraph,
    members: Set[int],
    strengths: Optional[Collection[DependencyStrength]],
) -> List[int]:
    """DFS preorder inside a component, from its lowest-index member."""
    start = min(members)
    inner = {
        node: [s for s in graph.successors(node, strengths) if s in members]
        for node in members
    }
    order = [start]
    visited = {start}
    work: List[Tuple[int, int]] = [(start, 0)]
    while work:
        node, pos = work[-1]
        if pos >= len(inner[node]):
            work.pop()
            continue
        work[-1] = (node, pos + 1)
        nxt = inner[node][pos]
        if nxt not in visited:
            visited.add(nxt)
            order.append(nxt)
            work.append((nxt, 0))
    return order


def _severity(graph: FeatureGraph, edge_indices: List[int]) -> CycleSeverity:
    strongest = max(graph.edges[i].strength.rank for i in edge_indices)
    if strongest >= DependencyStrength.REQUIRED.rank:
        return CycleSeverity.HIGH
    if strongest >= DependencyStrength.RECOMMENDED.rank:
        return CycleSeverity.MEDIUM
    return CycleSeverity.LOW


def _still_connected(
    members: Set[int],
    pairs: List[Tuple[int, int]],
    removed: Tuple[int, int],
) -> bool:
    """Whether the component stays strongly connected without one node pair."""
    forward: Dict[int, List[int]] = {m: [] for m in members}
    reverse: Dict[int, List[int]] = {m: [] for m in members}
    for pair in pairs:
        if pair == removed:
            continue
        forward[pair[0]].append(pair[1])
        reverse[pair[1]].append(pair[0])

    start = min(members)
    for adjacency in (forward, reverse):
        seen = {start}
        pending = [start]
        while pending:
            node = pending.pop()
            for nxt in adjacency[node]:
                if nxt not in seen:
                    seen.add(nxt)
                    pending.append(nxt)
        if len(seen) != len(members):
            return False
    return True


def _break_edge(
    graph: FeatureGraph,
    members: Set[int],
    edge_indices: List[int],
) -> Tuple[Tuple[int, int], bool]:
    """
    Cheapest node pair to cut.

    Pairs rank by their strongest parallel edge, then confidence, then the
    input position of their first edge. The first pair whose removal splits
    the component wins; densely connected components fall back to the
    cheapest pair.
    """
    ranking: Dict[Tuple[int, int], Tuple[int, float, int]] = {}
    for edge_idx in edge_indices:
        edge = graph.edges[edge_idx]
        pair = graph.edge_endpoints(edge_idx)
        current = ranking.get(pair)
        if current is None:
            ranking[pair] = (edge.strength.rank, edge.confidence, edge_idx)
            continue
        rank, confidence, first = current
        if edge.strength.rank > rank:
            rank, confidence = edge.strength.rank, edge.confidence
        elif edge.strength.rank == rank:
            confidence = max(confidence, edge.confidence)
        ranking[pair] = (rank, confidence, first)

    candidates = sorted(ranking, key=lambda p: ranking[p])
    pairs = list(ranking)
    for pair in candidates:
        if not _still_connected(members, pairs, pair):
            return pair, True
    return candidates[0], False


def describe_cycle(
    graph: FeatureGraph,
    component: Collection[int],
    strengths: Optional[Collection[DependencyStrength]] = None,
) -> CycleReport:
    """Build the CycleReport for one strongly connected component."""
    members = set(component)
    edge_indices = [
        i for i in graph.edges_within(members)
        if strengths is None or graph.edges[i].strength in strengths
    ]
    order = _discovery_order(graph, members, strengths)
    (src, dst), splits = _break_edge(graph, members, edge_indices)

    return CycleReport(
        cycle=[graph.feature_at(i).id for i in order],
        severity=_severity(graph, edge_indices),
        suggested_break_edge=(graph.feature_at(src).id, graph.feature_at(dst).id),
        breaks_component=splits,
    )


# =============================================================================
# ENTRY POINT
# =============================================================================

def find_cycles(graph: FeatureGraph) -> List[CycleReport]:
    """
    Detect every dependency cycle in the graph (all edge strengths).

    Returns:
        One CycleReport per strongly connected component of size > 1,
        ordered by the component's lowest feature index.
    """
    reports = [describe_cycle(graph, c) for c in cyclic_components(graph)]

    if reports:
        logger.warning(
            f"Circular dependencies detected: {len(reports)} cycle(s) "
            f"covering {sum(r.size for r in reports)} features"
        )
        for report in reports:
            logger.debug(
                f"Cycle {' -> '.join(report.cycle)} severity={report.severity.value} "
                f"break={report.suggested_break_edge[0]} -> {report.suggested_break_edge[1]}"
            )
    return reports
