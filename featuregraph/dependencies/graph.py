"""
dependencies/graph.py - Graph Store

Validated, immutable representation of features and dependency edges.

Nodes live in a dense arena (tuple of Feature, index = input position) with an
id -> index lookup. Edges are kept in input order after duplicate merging, and
adjacency is stored both forward (prerequisite -> dependent) and reverse for
the traversals done by the cycle detector, leveler and optimizer.
"""

from __future__ import annotations
from typing import (
    Any,
    Collection,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)
import hashlib
import json
import logging
import math

import networkx as nx

from featuregraph.core.enums import DependencyStrength, DependencyType, Priority
from featuregraph.core.models import Dependency, Feature
from featuregraph.errors import (
    DuplicateFeatureError,
    GraphError,
    InvalidDependencyError,
    InvalidFeatureError,
    SelfDependencyError,
    UnknownFeatureError,
)

logger = logging.getLogger(__name__)


FeatureInput = Union[Feature, Dict[str, Any]]
DependencyInput = Union[Dependency, Dict[str, Any]]

MIN_COMPLEXITY = 1
MAX_COMPLEXITY = 10


# =============================================================================
# FEATURE GRAPH
# =============================================================================

class FeatureGraph:
    """
    Immutable feature-dependency graph.

    Construct with build_graph(); the constructor assumes already validated
    input.
    """

    def __init__(self, features: Sequence[Feature], edges: Sequence[Dependency]):
        self._features: Tuple[Feature, ...] = tuple(features)
        self._edges: Tuple[Dependency, ...] = tuple(edges)
        self._index: Dict[str, int] = {f.id: i for i, f in enumerate(self._features)}

        forward: List[List[int]] = [[] for _ in self._features]
        reverse: List[List[int]] = [[] for _ in self._features]
        for edge_idx, edge in enumerate(self._edges):
            forward[self._index[edge.from_feature_id]].append(edge_idx)
            reverse[self._index[edge.to_feature_id]].append(edge_idx)

        self._forward: Tuple[Tuple[int, ...], ...] = tuple(tuple(e) for e in forward)
        self._reverse: Tuple[Tuple[int, ...], ...] = tuple(tuple(e) for e in reverse)

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    @property
    def features(self) -> Tuple[Feature, ...]:
        return self._features

    @property
    def edges(self) -> Tuple[Dependency, ...]:
        return self._edges

    def __len__(self) -> int:
        return len(self._features)

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._index

    def index_of(self, feature_id: str) -> int:
        """Arena index of a feature id (KeyError if unknown)."""
        return self._index[feature_id]

    def feature(self, feature_id: str) -> Feature:
        return self._features[self._index[feature_id]]

    def feature_at(self, index: int) -> Feature:
        return self._features[index]

    # -------------------------------------------------------------------------
    # Adjacency
    # -------------------------------------------------------------------------

    def outgoing(self, index: int) -> Tuple[int, ...]:
        """Edge indices leaving a node, in input order."""
        return self._forward[index]

    def incoming(self, index: int) -> Tuple[int, ...]:
        """Edge indices entering a node, in input order."""
        return self._reverse[index]

    def successors(
        self,
        index: int,
        strengths: Optional[Collection[DependencyStrength]] = None,
    ) -> List[int]:
        """Dependent node indices, first-seen order, parallel edges collapsed."""
        result: List[int] = []
        seen = set()
        for edge_idx in self._forward[index]:
            edge = self._edges[edge_idx]
            if strengths is not None and edge.strength not in strengths:
                continue
            target = self._index[edge.to_feature_id]
            if target not in seen:
                seen.add(target)
                result.append(target)
        return result

    def predecessors(
        self,
        index: int,
        strengths: Optional[Collection[DependencyStrength]] = None,
    ) -> List[int]:
        """Prerequisite node indices, first-seen order, parallel edges collapsed."""
        result: List[int] = []
        seen = set()
        for edge_idx in self._reverse[index]:
            edge = self._edges[edge_idx]
            if strengths is not None and edge.strength not in strengths:
                continue
            source = self._index[edge.from_feature_id]
            if source not in seen:
                seen.add(source)
                result.append(source)
        return result

    def edge_endpoints(self, edge_idx: int) -> Tuple[int, int]:
        edge = self._edges[edge_idx]
        return self._index[edge.from_feature_id], self._index[edge.to_feature_id]

    def edges_within(self, indices: Collection[int]) -> List[int]:
        """Edge indices whose both endpoints are in the given node set."""
        members: FrozenSet[int] = frozenset(indices)
        result = []
        for node in sorted(members):
            for edge_idx in self._forward[node]:
                if self._index[self._edges[edge_idx].to_feature_id] in members:
                    result.append(edge_idx)
        result.sort()
        return result

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "features": [f.to_dict() for f in self._features],
            "edges": [e.to_dict() for e in self._edges],
        }

    def fingerprint(self) -> str:
        """
        Stable digest of the feature/edge set.

        Callers that cache engine results key them on this value; any change
        to features or edges yields a different fingerprint.
        """
        payload = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def to_networkx(
        self,
        strengths: Optional[Collection[DependencyStrength]] = None,
    ) -> "nx.MultiDiGraph":
        """
        Export as a networkx MultiDiGraph for visualization or ad hoc analysis.

        Nodes are feature ids carrying name, priority and complexity; each
        edge (keyed by dependency type) carries strength, confidence, reason
        and auto_detected. Attribute values are plain strings/numbers so the
        result can be written with nx.write_graphml().

        Args:
            strengths: Only export edges of these strengths (None = all)
        """
        G = nx.MultiDiGraph()
        for feature in self._features:
            G.add_node(
                feature.id,
                name=feature.name,
                description=feature.description,
                priority=feature.priority.value,
                complexity=feature.complexity,
            )
        for edge in self._edges:
            if strengths is not None and edge.strength not in strengths:
                continue
            G.add_edge(
                edge.from_feature_id,
                edge.to_feature_id,
                key=edge.dependency_type.value,
                dependency_type=edge.dependency_type.value,
                strength=edge.strength.value,
                confidence=float(edge.confidence),
                reason=edge.reason or "",
                auto_detected=edge.auto_detected,
            )
        return G

    def __repr__(self) -> str:
        return f"FeatureGraph(features={len(self._features)}, edges={len(self._edges)})"


# =============================================================================
# CONSTRUCTION
# =============================================================================

def _coerce_feature(raw: FeatureInput, position: int) -> Feature:
    if isinstance(raw, Feature):
        return raw
    if isinstance(raw, dict):
        try:
            return Feature.from_dict(raw)
        except (ValueError, TypeError) as e:
            raise InvalidFeatureError(
                f"Feature #{position} is malformed: {e}",
                feature_id=raw.get("id") if isinstance(raw.get("id"), str) else None,
                index=position,
            ) from e
    raise InvalidFeatureError(
        f"Feature #{position} has unsupported type {type(raw).__name__}",
        index=position,
    )


def _validate_feature(feature: Feature, position: int, seen: Dict[str, int]) -> None:
    if not isinstance(feature.id, str) or not feature.id.strip():
        raise InvalidFeatureError(
            f"Feature #{position} has an empty or non-string id",
            index=position,
        )
    if feature.id in seen:
        raise DuplicateFeatureError(
            f"Duplicate feature id {feature.id!r} (first seen at #{seen[feature.id]})",
            feature_id=feature.id,
            index=position,
        )
    for attr in ("name", "description"):
        if not isinstance(getattr(feature, attr), str):
            raise InvalidFeatureError(
                f"Feature {feature.id!r} {attr} must be a string, got {getattr(feature, attr)!r}",
                feature_id=feature.id,
                index=position,
            )
    if not isinstance(feature.priority, Priority):
        raise InvalidFeatureError(
            f"Feature {feature.id!r} has invalid priority {feature.priority!r}",
            feature_id=feature.id,
            index=position,
        )
    complexity = feature.complexity
    if (
        isinstance(complexity, bool)
        or not isinstance(complexity, int)
        or not MIN_COMPLEXITY <= complexity <= MAX_COMPLEXITY
    ):
        raise InvalidFeatureError(
            f"Feature {feature.id!r} complexity must be an integer "
            f"{MIN_COMPLEXITY}..{MAX_COMPLEXITY}, got {complexity!r}",
            feature_id=feature.id,
            index=position,
        )


def _coerce_edge(raw: DependencyInput, position: int) -> Dependency:
    if isinstance(raw, Dependency):
        return raw
    if isinstance(raw, dict):
        try:
            return Dependency.from_dict(raw)
        except (ValueError, TypeError) as e:
            raise InvalidDependencyError(
                f"Dependency #{position} is malformed: {e}",
                index=position,
            ) from e
    raise InvalidDependencyError(
        f"Dependency #{position} has unsupported type {type(raw).__name__}",
        index=position,
    )


def _validate_edge(edge: Dependency, position: int, known: Dict[str, int]) -> None:
    if not isinstance(edge.dependency_type, DependencyType):
        raise InvalidDependencyError(
            f"Dependency #{position} has invalid type {edge.dependency_type!r}",
            edge=edge,
            index=position,
        )
    if not isinstance(edge.strength, DependencyStrength):
        raise InvalidDependencyError(
            f"Dependency #{position} has invalid strength {edge.strength!r}",
            edge=edge,
            index=position,
        )
    for endpoint in (edge.from_feature_id, edge.to_feature_id):
        if not isinstance(endpoint, str):
            raise InvalidDependencyError(
                f"Dependency #{position} endpoint must be a feature id string, got {endpoint!r}",
                edge=edge,
                index=position,
            )
        if endpoint not in known:
            raise UnknownFeatureError(
                f"Dependency #{position} {edge.from_feature_id!r} -> "
                f"{edge.to_feature_id!r} references unknown feature {endpoint!r}",
                feature_id=endpoint,
                edge=edge,
                index=position,
            )
    if edge.from_feature_id == edge.to_feature_id:
        raise SelfDependencyError(
            f"Feature {edge.from_feature_id!r} cannot depend on itself",
            feature_id=edge.from_feature_id,
            edge=edge,
            index=position,
        )
    if edge.reason is not None and not isinstance(edge.reason, str):
        raise InvalidDependencyError(
            f"Dependency #{position} reason must be a string, got {edge.reason!r}",
            edge=edge,
            index=position,
        )
    confidence = edge.confidence
    if (
        isinstance(confidence, bool)
        or not isinstance(confidence, (int, float))
        or math.isnan(confidence)
        or not 0.0 <= confidence <= 1.0
    ):
        raise InvalidDependencyError(
            f"Dependency #{position} confidence must be within 0..1, got {confidence!r}",
            edge=edge,
            index=position,
        )


def build_graph(
    features: Iterable[FeatureInput],
    edges: Iterable[DependencyInput],
) -> FeatureGraph:
    """
    Validate features and edges and build a FeatureGraph.

    Features are validated first, then edges, each in input order; the first
    violation raises a GraphError subclass naming the offending record.
    Edges repeating the same (from, to, dependency_type) are merged into one
    edge keeping the higher strength.

    Args:
        features: Feature records or dicts
        edges: Dependency records or dicts

    Returns:
        FeatureGraph

    Raises:
        GraphError: on the first invalid feature or edge
    """
    try:
        node_list: List[Feature] = []
        known: Dict[str, int] = {}
        for position, raw in enumerate(features):
            feature = _coerce_feature(raw, position)
            _validate_feature(feature, position, known)
            known[feature.id] = position
            node_list.append(feature)

        edge_list: List[Dependency] = []
        slots: Dict[Tuple[str, str, DependencyType], int] = {}
        merged = 0
        for position, raw in enumerate(edges):
            edge = _coerce_edge(raw, position)
            _validate_edge(edge, position, known)

            key = (edge.from_feature_id, edge.to_feature_id, edge.dependency_type)
            slot = slots.get(key)
            if slot is None:
                slots[key] = len(edge_list)
                edge_list.append(edge)
                continue

            merged += 1
            if edge.strength.rank > edge_list[slot].strength.rank:
                edge_list[slot] = edge
            logger.debug(
                f"Merged duplicate edge {edge.from_feature_id} -> {edge.to_feature_id} "
                f"({edge.dependency_type.value}), kept {edge_list[slot].strength.value}"
            )
    except GraphError as e:
        logger.warning(f"Rejected feature graph: {e.message}")
        raise

    graph = FeatureGraph(node_list, edge_list)
    logger.info(
        f"Feature graph built: {len(node_list)} features, {len(edge_list)} edges"
        + (f" ({merged} duplicates merged)" if merged else "")
    )
    return graph
