"""
featuregraph - Feature-dependency graph engine

Deterministic cycle detection, critical path and build ordering for product
features:

    graph = build_graph(features, dependencies)
    cycles = find_cycles(graph)
    plan = optimize_build_order(graph, "fastest")
    wins = quick_wins(graph, 5)

Every call is a pure function of its inputs; nothing is cached or persisted.
"""

from featuregraph.core import (
    Priority,
    DependencyType,
    DependencyStrength,
    CycleSeverity,
    OptimizationStrategy,
    Feature,
    Dependency,
)
from featuregraph.errors import (
    ErrorKind,
    GraphError,
    UnknownFeatureError,
    SelfDependencyError,
    DuplicateFeatureError,
    InvalidFeatureError,
    InvalidDependencyError,
)
from featuregraph.dependencies import (
    FeatureGraph,
    CycleReport,
    LevelResult,
    ParallelGroup,
    BuildOrderResult,
    build_graph,
    find_cycles,
    compute_levels,
    optimize_build_order,
    quick_wins,
)

__version__ = "1.0.0"

__all__ = [
    # Records
    "Priority",
    "DependencyType",
    "DependencyStrength",
    "CycleSeverity",
    "OptimizationStrategy",
    "Feature",
    "Dependency",
    # Errors
    "ErrorKind",
    "GraphError",
    "UnknownFeatureError",
    "SelfDependencyError",
    "DuplicateFeatureError",
    "InvalidFeatureError",
    "InvalidDependencyError",
    # Engine
    "FeatureGraph",
    "CycleReport",
    "LevelResult",
    "ParallelGroup",
    "BuildOrderResult",
    "build_graph",
    "find_cycles",
    "compute_levels",
    "optimize_build_order",
    "quick_wins",
]
