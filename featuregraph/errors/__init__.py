"""
errors/ - Error taxonomy for graph construction.
"""

from .taxonomy import (
    ErrorKind,
    GraphError,
    UnknownFeatureError,
    SelfDependencyError,
    DuplicateFeatureError,
    InvalidFeatureError,
    InvalidDependencyError,
)

__all__ = [
    "ErrorKind",
    "GraphError",
    "UnknownFeatureError",
    "SelfDependencyError",
    "DuplicateFeatureError",
    "InvalidFeatureError",
    "InvalidDependencyError",
]
