"""
dependencies/leveler.py - Critical Path & Leveler

Assigns every feature a topological level (Kahn layer) and finds the critical
path: the longest weighted chain of dependent features, where a feature's
weight is its complexity.

Cycles cannot be ordered, so each one is condensed into a single bucket node;
its members share the level at which their outside prerequisites are done and
they are left out of the critical path.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Collection,
    Dict,
    FrozenSet,
    List,
    Optional,
    Set,
)
import heapq
import logging

from featuregraph.core.enums import BLOCKING_STRENGTHS, DependencyStrength

from .cycles import cyclic_components
from .graph import FeatureGraph

logger = logging.getLogger(__name__)


# =============================================================================
# LEVEL RESULT
# =============================================================================

@dataclass(frozen=True)
class LevelResult:
    """Levels, weighted distances and critical path under one edge set."""
    levels: Dict[str, int] = field(default_factory=dict)
    distances: Dict[str, int] = field(default_factory=dict)
    critical_path: List[str] = field(default_factory=list)
    critical_path_weight: int = 0
    cyclic_features: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "levels": dict(self.levels),
            "distances": dict(self.distances),
            "critical_path": list(self.critical_path),
            "critical_path_weight": self.critical_path_weight,
            "cyclic_features": sorted(self.cyclic_features),
        }


# =============================================================================
# CONDENSATION
# =============================================================================

class Condensation:
    """
    The enforced subgraph with every cycle collapsed into one group.

    Groups are numbered in order of their lowest member index. A group is a
    single feature unless it is a cycle bucket. The group graph is acyclic,
    so Kahn's algorithm always drains it.
    """

    def __init__(
        self,
        graph: FeatureGraph,
        strengths: Collection[DependencyStrength] = BLOCKING_STRENGTHS,
        cycle_nodes: Optional[Collection[str]] = None,
    ):
        self.graph = graph
        self.strengths = frozenset(strengths)

        buckets = self._buckets(graph, self.strengths, cycle_nodes)
        bucket_of: Dict[int, int] = {}
        for b, bucket in enumerate(buckets):
            for node in bucket:
                bucket_of[node] = b

        self.members: List[List[int]] = []
        self.is_cycle: List[bool] = []
        self.group_of: List[int] = [-1] * len(graph)
        emitted: Set[int] = set()
        for node in range(len(graph)):
            if node in bucket_of:
                b = bucket_of[node]
                if b in emitted:
                    continue
                emitted.add(b)
                group = buckets[b]
            else:
                group = [node]
            gid = len(self.members)
            self.members.append(group)
            self.is_cycle.append(len(group) > 1)
            for member in group:
                self.group_of[member] = gid

        count = len(self.members)
        preds: List[Set[int]] = [set() for _ in range(count)]
        succs: List[Set[int]] = [set() for _ in range(count)]
        for node in range(len(graph)):
            g = self.group_of[node]
            for target in graph.successors(node, self.strengths):
                t = self.group_of[target]
                if t != g:
                    succs[g].add(t)
                    preds[t].add(g)
        self.preds: List[List[int]] = [sorted(p) for p in preds]
        self.succs: List[List[int]] = [sorted(s) for s in succs]

        self.keys: List[str] = [
            min(graph.feature_at(m).id for m in group) for group in self.members
        ]
        self.weights: List[int] = [
            max(graph.feature_at(m).weight for m in group) for group in self.members
        ]

        self.order: List[int] = self.topological_order(lambda g: self.keys[g])
        self.levels: List[int] = [0] * count
        for g in self.order:
            if self.preds[g]:
                self.levels[g] = max(self.levels[p] for p in self.preds[g]) + 1

    @staticmethod
    def _buckets(
        graph: FeatureGraph,
        strengths: FrozenSet[DependencyStrength],
        cycle_nodes: Optional[Collection[str]],
    ) -> List[List[int]]:
        buckets = cyclic_components(graph, strengths)
        if not cycle_nodes:
            return buckets

        # Flagged features take their whole cycle (over all edges) with them;
        # enforced cycles inside it are absorbed.
        flagged = {graph.index_of(fid) for fid in cycle_nodes if fid in graph}
        merged: List[List[int]] = []
        covered: Set[int] = set()
        for component in cyclic_components(graph):
            if flagged.intersection(component):
                merged.append(component)
                covered.update(component)
        for bucket in buckets:
            if not covered.intersection(bucket):
                merged.append(bucket)
        merged.sort(key=lambda c: c[0])
        return merged

    def __len__(self) -> int:
        return len(self.members)

    def topological_order(self, key: Callable[[int], Any]) -> List[int]:
        """Kahn's algorithm over groups; among ready groups the smallest key goes first."""
        indegree = [len(p) for p in self.preds]
        ready = [(key(g), g) for g in range(len(self.members)) if indegree[g] == 0]
        heapq.heapify(ready)
        order: List[int] = []
        while ready:
            _, g = heapq.heappop(ready)
            order.append(g)
            for s in self.succs[g]:
                indegree[s] -= 1
                if indegree[s] == 0:
                    heapq.heappush(ready, (key(s), s))
        return order

    @property
    def layer_count(self) -> int:
        return max(self.levels) + 1 if self.levels else 0

    def latest_levels(self) -> List[int]:
        """As-late-as-possible levels within the same number of layers."""
        last = self.layer_count - 1
        latest = [last] * len(self.members)
        for g in reversed(self.order):
            if self.succs[g]:
                latest[g] = min(latest[s] for s in self.succs[g]) - 1
        return latest

    def cyclic_nodes(self) -> List[int]:
        return sorted(m for g, group in enumerate(self.members) if self.is_cycle[g] for m in group)

    def feature_levels(self) -> Dict[str, int]:
        levels: Dict[str, int] = {}
        for g in self.order:
            for m in self.members[g]:
                levels[self.graph.feature_at(m).id] = self.levels[g]
        return levels


# =============================================================================
# CRITICAL PATH
# =============================================================================

def _critical_path(cond: Condensation) -> LevelResult:
    graph = cond.graph
    distances: Dict[str, int] = {}
    best_pred: Dict[int, Optional[int]] = {}
    dist_by_node: Dict[int, int] = {}

    for g in cond.order:
        if cond.is_cycle[g]:
            continue
        node = cond.members[g][0]
        feature = graph.feature_at(node)

        chosen: Optional[int] = None
        for p in graph.predecessors(node, cond.strengths):
            if p not in dist_by_node:
                continue
            if (
                chosen is None
                or dist_by_node[p] > dist_by_node[chosen]
                or (
                    dist_by_node[p] == dist_by_node[chosen]
                    and graph.feature_at(p).id < graph.feature_at(chosen).id
                )
            ):
                chosen = p

        dist_by_node[node] = feature.weight + (dist_by_node[chosen] if chosen is not None else 0)
        best_pred[node] = chosen
        distances[feature.id] = dist_by_node[node]

    path: List[str] = []
    weight = 0
    if dist_by_node:
        end = min(dist_by_node, key=lambda n: (-dist_by_node[n], graph.feature_at(n).id))
        weight = dist_by_node[end]
        cursor: Optional[int] = end
        while cursor is not None:
            path.append(graph.feature_at(cursor).id)
            cursor = best_pred[cursor]
        path.reverse()

    return LevelResult(
        levels=cond.feature_levels(),
        distances=distances,
        critical_path=path,
        critical_path_weight=weight,
        cyclic_features=frozenset(graph.feature_at(n).id for n in cond.cyclic_nodes()),
    )


def compute_levels(
    graph: FeatureGraph,
    cycle_nodes: Optional[Collection[str]] = None,
    strengths: Collection[DependencyStrength] = BLOCKING_STRENGTHS,
) -> LevelResult:
    """
    Compute per-feature levels and the critical path.

    Args:
        graph: Feature graph
        cycle_nodes: Features known to sit in a cycle; each is bucketed with
            its whole cycle. Cycles of the enforced edge set are always
            bucketed.
        strengths: Edge strengths that constrain ordering (default
            required + recommended)

    Returns:
        LevelResult with levels for every feature, weighted distances and
        the critical path of the acyclic part
    """
    return level_condensation(Condensation(graph, strengths, cycle_nodes))


def level_condensation(cond: Condensation) -> LevelResult:
    """LevelResult for an already built condensation."""
    result = _critical_path(cond)
    logger.debug(
        f"Levels computed: {cond.layer_count} layers, critical path "
        f"{len(result.critical_path)} features (weight {result.critical_path_weight})"
    )
    return result
