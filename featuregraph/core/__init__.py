"""
core/ - Enumerations and input records.
"""

from .enums import (
    Priority,
    DependencyType,
    DependencyStrength,
    CycleSeverity,
    OptimizationStrategy,
    ALL_STRENGTHS,
    BLOCKING_STRENGTHS,
)
from .models import Feature, Dependency, coerce_enum

__all__ = [
    "Priority",
    "DependencyType",
    "DependencyStrength",
    "CycleSeverity",
    "OptimizationStrategy",
    "ALL_STRENGTHS",
    "BLOCKING_STRENGTHS",
    "Feature",
    "Dependency",
    "coerce_enum",
]
