"""
core/enums.py - Feature graph enumerations.

Shared enum types for features, dependency edges, cycle reports and
build-order strategies.
"""

from enum import Enum
from typing import FrozenSet


class Priority(Enum):
    """Business priority of a feature."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


class DependencyType(Enum):
    """Kind of relationship between two features."""
    TECHNICAL = "technical"   # API before UI, auth before protected features
    LOGICAL = "logical"       # data model before CRUD
    BUSINESS = "business"     # MVP before enhancements


class DependencyStrength(Enum):
    """How strictly an edge must be honoured."""
    REQUIRED = "required"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"

    @property
    def rank(self) -> int:
        return _STRENGTH_RANK[self]


class CycleSeverity(Enum):
    """Severity of a detected dependency cycle."""
    HIGH = "high"       # contains a required edge
    MEDIUM = "medium"   # strongest edge is recommended
    LOW = "low"         # optional edges only


class OptimizationStrategy(Enum):
    """Build-order strategy."""
    SAFEST = "safest"
    BALANCED = "balanced"
    FASTEST = "fastest"

    @property
    def enforced_strengths(self) -> FrozenSet[DependencyStrength]:
        """Edge strengths that constrain ordering under this strategy."""
        return _ENFORCED[self]


_PRIORITY_RANK = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}

_STRENGTH_RANK = {
    DependencyStrength.REQUIRED: 3,
    DependencyStrength.RECOMMENDED: 2,
    DependencyStrength.OPTIONAL: 1,
}

ALL_STRENGTHS: FrozenSet[DependencyStrength] = frozenset(DependencyStrength)

BLOCKING_STRENGTHS: FrozenSet[DependencyStrength] = frozenset({
    DependencyStrength.REQUIRED,
    DependencyStrength.RECOMMENDED,
})

_ENFORCED = {
    OptimizationStrategy.SAFEST: ALL_STRENGTHS,
    OptimizationStrategy.BALANCED: BLOCKING_STRENGTHS,
    OptimizationStrategy.FASTEST: frozenset({DependencyStrength.REQUIRED}),
}
