"""
featuregraph Dependency Engine

Provides:
- FeatureGraph / build_graph: validated feature-dependency graph
- find_cycles: Tarjan SCC cycle detection with severity and break edge
- compute_levels: topological levels and weighted critical path
- optimize_build_order: safest / balanced / fastest build plans
- quick_wins: unblocked features, cheapest first
"""

from .graph import (
    FeatureGraph,
    build_graph,
    MIN_COMPLEXITY,
    MAX_COMPLEXITY,
)
from .cycles import (
    CycleReport,
    find_cycles,
    strongly_connected_components,
    cyclic_components,
)
from .leveler import (
    Condensation,
    LevelResult,
    compute_levels,
)
from .optimizer import (
    BuildOrderResult,
    ParallelGroup,
    optimize_build_order,
)
from .quick_wins import quick_wins

__all__ = [
    # Graph Store
    "FeatureGraph",
    "build_graph",
    "MIN_COMPLEXITY",
    "MAX_COMPLEXITY",
    # Cycle Detector
    "CycleReport",
    "find_cycles",
    "strongly_connected_components",
    "cyclic_components",
    # Leveler
    "Condensation",
    "LevelResult",
    "compute_levels",
    # Optimizer
    "BuildOrderResult",
    "ParallelGroup",
    "optimize_build_order",
    "quick_wins",
]
