"""
dependencies/quick_wins.py - Quick-win identification

Features nothing blocks (no incoming required/recommended edge), cheapest
first.
"""

from __future__ import annotations
from typing import List, Optional
import logging

from featuregraph.core.enums import BLOCKING_STRENGTHS

from .graph import FeatureGraph

logger = logging.getLogger(__name__)


def quick_wins(graph: FeatureGraph, limit: Optional[int] = None) -> List[str]:
    """
    Rank features that can be started immediately.

    A feature qualifies when it has no incoming required or recommended edge
    (optional-only or no incoming edges). Ranked by complexity ascending,
    then priority descending, then id ascending.

    Args:
        graph: Feature graph
        limit: Maximum number of ids to return (None = all)

    Returns:
        Ordered feature ids
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    candidates = [
        graph.feature_at(i)
        for i in range(len(graph))
        if not graph.predecessors(i, BLOCKING_STRENGTHS)
    ]
    candidates.sort(key=lambda f: (f.complexity, -f.priority.rank, f.id))

    ranked = [f.id for f in candidates]
    if limit is not None:
        ranked = ranked[:limit]

    logger.debug(f"Quick wins: {len(candidates)} unblocked features, returning {len(ranked)}")
    return ranked
