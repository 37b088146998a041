"""
dependencies/optimizer.py - Build-Order Optimizer

Turns the leveled graph into a strategy-specific build plan:

- safest:   every edge enforced, one feature per group (fully linear)
- balanced: required + recommended enforced, one group per level
- fastest:  required only, one group per layer after slack levelling

Cycle members are placed as an unordered bucket at the point their outside
prerequisites are satisfied; ordering relative to their cycle partners is
arbitrary (priority, then id).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Tuple, Union
import logging

from featuregraph.core.enums import OptimizationStrategy
from featuregraph.core.models import Feature, coerce_enum

from .graph import FeatureGraph
from .leveler import Condensation, LevelResult, level_condensation

logger = logging.getLogger(__name__)


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class ParallelGroup:
    """Features that can be built at the same time."""
    level: int
    members: List[str]
    estimated_time: int

    @property
    def features(self) -> FrozenSet[str]:
        return frozenset(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "features": list(self.members),
            "estimated_time": self.estimated_time,
        }


@dataclass(frozen=True)
class BuildOrderResult:
    """Build plan for one strategy. Never mutated after construction."""
    strategy: OptimizationStrategy
    build_order: List[str] = field(default_factory=list)
    parallel_groups: List[ParallelGroup] = field(default_factory=list)
    critical_path: List[str] = field(default_factory=list)
    notes: str = ""
    total_estimated_time: int = 0
    critical_path_weight: int = 0
    cyclic_features: FrozenSet[str] = frozenset()

    @property
    def estimated_phases(self) -> int:
        return len(self.parallel_groups)

    @property
    def is_empty(self) -> bool:
        return not self.build_order

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "build_order": list(self.build_order),
            "parallel_groups": [g.to_dict() for g in self.parallel_groups],
            "critical_path": list(self.critical_path),
            "critical_path_weight": self.critical_path_weight,
            "total_estimated_time": self.total_estimated_time,
            "cyclic_features": sorted(self.cyclic_features),
            "notes": self.notes,
        }


# =============================================================================
# ORDERING HELPERS
# =============================================================================

def feature_sort_key(feature: Feature) -> Tuple[int, str]:
    """Priority descending, then id ascending."""
    return (-feature.priority.rank, feature.id)


def _ordered_ids(graph: FeatureGraph, nodes: List[int]) -> List[str]:
    return [f.id for f in sorted((graph.feature_at(n) for n in nodes), key=feature_sort_key)]


def _make_group(graph: FeatureGraph, level: int, nodes: List[int]) -> ParallelGroup:
    return ParallelGroup(
        level=level,
        members=_ordered_ids(graph, nodes),
        estimated_time=max(graph.feature_at(n).weight for n in nodes),
    )


# =============================================================================
# STRATEGIES
# =============================================================================

def _linear_groups(cond: Condensation) -> List[ParallelGroup]:
    """safest: topological order with priority/id tie-breaks, one feature per group."""
    graph = cond.graph

    def group_key(g: int) -> Tuple[int, str]:
        return min(feature_sort_key(graph.feature_at(m)) for m in cond.members[g])

    groups: List[ParallelGroup] = []
    for g in cond.topological_order(group_key):
        for fid in _ordered_ids(graph, cond.members[g]):
            node = graph.index_of(fid)
            groups.append(_make_group(graph, len(groups), [node]))
    return groups


def _layers_from_levels(cond: Condensation, levels: List[int]) -> List[ParallelGroup]:
    layers: Dict[int, List[int]] = {}
    for g in range(len(cond)):
        layers.setdefault(levels[g], []).extend(cond.members[g])
    return [_make_group(cond.graph, level, layers[level]) for level in sorted(layers)]


def _soft_neighbours(cond: Condensation) -> Tuple[List[List[int]], List[List[int]]]:
    """Group-level prerequisites/dependents over edges the strategy does not enforce."""
    graph = cond.graph
    before: List[set] = [set() for _ in range(len(cond))]
    after: List[set] = [set() for _ in range(len(cond))]
    for edge_idx, edge in enumerate(graph.edges):
        if edge.strength in cond.strengths:
            continue
        src, dst = graph.edge_endpoints(edge_idx)
        gs, gd = cond.group_of[src], cond.group_of[dst]
        if gs != gd:
            before[gd].add(gs)
            after[gs].add(gd)
    return [sorted(s) for s in before], [sorted(s) for s in after]


def _levelled_layers(cond: Condensation) -> List[int]:
    """
    Slack levelling for the fastest strategy.

    Groups with no slack (earliest == latest layer) stay fixed and set each
    layer's slowest weight. Every other group, in topological order, takes the
    layer inside its window that least raises that layer's slowest weight;
    ties go to the layer that honours more non-enforced edges, then the
    earliest layer.
    """
    earliest = cond.levels
    latest = cond.latest_levels()
    soft_before, soft_after = _soft_neighbours(cond)

    placed: Dict[int, int] = {}
    layer_max = [0] * cond.layer_count
    for g in range(len(cond)):
        if earliest[g] == latest[g]:
            placed[g] = earliest[g]
            layer_max[earliest[g]] = max(layer_max[earliest[g]], cond.weights[g])

    def position(g: int) -> int:
        return placed.get(g, earliest[g])

    for g in cond.order:
        if g in placed:
            continue
        low = max((placed[p] + 1 for p in cond.preds[g]), default=0)
        high = latest[g]

        def cost(layer: int) -> Tuple[int, int, int]:
            raise_by = max(0, cond.weights[g] - layer_max[layer])
            violations = sum(1 for p in soft_before[g] if position(p) >= layer)
            violations += sum(1 for s in soft_after[g] if position(s) <= layer)
            return (raise_by, violations, layer)

        chosen = min(range(low, high + 1), key=cost)
        placed[g] = chosen
        layer_max[chosen] = max(layer_max[chosen], cond.weights[g])

    return [placed[g] for g in range(len(cond))]


# =============================================================================
# ENTRY POINT
# =============================================================================

def _notes(
    strategy: OptimizationStrategy,
    feature_count: int,
    groups: List[ParallelGroup],
    total: int,
    levels: LevelResult,
) -> str:
    label = "sequential steps" if strategy is OptimizationStrategy.SAFEST else "parallel groups"
    parts = [
        f"{strategy.value}: {feature_count} features in {len(groups)} {label}, "
        f"total estimated time {total}"
    ]
    if levels.critical_path:
        parts.append(
            f"critical path {' -> '.join(levels.critical_path)} "
            f"(weight {levels.critical_path_weight})"
        )
    if levels.cyclic_features:
        parts.append(
            f"{len(levels.cyclic_features)} features in dependency cycles "
            f"placed as unordered buckets"
        )
    return "; ".join(parts)


def optimize_build_order(
    graph: FeatureGraph,
    strategy: Union[OptimizationStrategy, str] = OptimizationStrategy.BALANCED,
) -> BuildOrderResult:
    """
    Compute the build plan for a strategy.

    Args:
        graph: Feature graph from build_graph()
        strategy: OptimizationStrategy or its string value

    Returns:
        BuildOrderResult; empty (not an error) when the graph has no features
    """
    strategy = coerce_enum(OptimizationStrategy, strategy)

    if len(graph) == 0:
        logger.info(f"Build order ({strategy.value}): empty feature set")
        return BuildOrderResult(strategy=strategy, notes="No features to order")

    cond = Condensation(graph, strategy.enforced_strengths)
    levels = level_condensation(cond)

    if strategy is OptimizationStrategy.SAFEST:
        groups = _linear_groups(cond)
    elif strategy is OptimizationStrategy.BALANCED:
        groups = _layers_from_levels(cond, cond.levels)
    else:
        groups = _layers_from_levels(cond, _levelled_layers(cond))

    build_order = [fid for group in groups for fid in group.members]
    total = sum(group.estimated_time for group in groups)

    result = BuildOrderResult(
        strategy=strategy,
        build_order=build_order,
        parallel_groups=groups,
        critical_path=list(levels.critical_path),
        notes=_notes(strategy, len(graph), groups, total, levels),
        total_estimated_time=total,
        critical_path_weight=levels.critical_path_weight,
        cyclic_features=levels.cyclic_features,
    )

    logger.info(
        f"Build order ({strategy.value}): {len(build_order)} features in "
        f"{len(groups)} groups, estimated time {total}"
    )
    return result
