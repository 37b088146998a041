"""
errors/taxonomy.py - Graph construction error classification

Every rejected input raises a GraphError subclass identifying the offending
feature or edge. Construction errors are caller-side data bugs and are never
retried.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Dict, Optional
from enum import Enum

if TYPE_CHECKING:
    from featuregraph.core.models import Dependency


class ErrorKind(Enum):
    """Error kinds raised or reported by the engine."""
    UNKNOWN_FEATURE = "unknown_feature"
    SELF_DEPENDENCY = "self_dependency"
    EMPTY_FEATURE_SET = "empty_feature_set"   # reported, never raised
    DUPLICATE_FEATURE = "duplicate_feature"
    INVALID_FEATURE = "invalid_feature"
    INVALID_DEPENDENCY = "invalid_dependency"


class GraphError(Exception):
    """Base exception for rejected feature/edge sets."""

    kind: ErrorKind = ErrorKind.INVALID_FEATURE

    def __init__(
        self,
        message: str,
        feature_id: Optional[str] = None,
        edge: Optional["Dependency"] = None,
        index: Optional[int] = None,
    ):
        self.message = message
        self.feature_id = feature_id
        self.edge = edge
        self.index = index
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "feature_id": self.feature_id,
            "edge": self.edge.to_dict() if self.edge is not None else None,
            "index": self.index,
        }


class UnknownFeatureError(GraphError):
    """Edge references a feature id that is not in the feature set."""
    kind = ErrorKind.UNKNOWN_FEATURE


class SelfDependencyError(GraphError):
    """Edge with from == to."""
    kind = ErrorKind.SELF_DEPENDENCY


class DuplicateFeatureError(GraphError):
    """Two features share the same id."""
    kind = ErrorKind.DUPLICATE_FEATURE


class InvalidFeatureError(GraphError):
    """Feature record is malformed (empty id, complexity out of range...)."""
    kind = ErrorKind.INVALID_FEATURE


class InvalidDependencyError(GraphError):
    """Edge record is malformed (bad enum value, confidence out of range...)."""
    kind = ErrorKind.INVALID_DEPENDENCY
