"""
suggestions/intake.py - AI suggestion intake

Caller-side filter between the AI dependency proposer and build_graph().
Parses a model response, drops entries that reference unknown features or
loop on themselves, and keeps only suggestions whose confidence is strictly
above the configured threshold.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Collection, Dict, Iterable, List, Optional, Union
import json
import logging

from pydantic import ValidationError

from featuregraph.bootstrap.config import get_config
from featuregraph.core.models import Dependency

from .schemas import DependencyAnalysisResponse, DetectedDependency

logger = logging.getLogger(__name__)


# Used when neither the entry nor the response carries a confidence
DEFAULT_CONFIDENCE = 0.8


class SuggestionParseError(ValueError):
    """Response is not valid JSON or does not match the analysis schema."""


@dataclass
class RejectedSuggestion:
    """A proposed dependency that was not accepted."""
    suggestion: Dict[str, Any]
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"suggestion": self.suggestion, "reason": self.reason}


@dataclass
class SuggestionIntake:
    """Outcome of filtering AI-proposed dependencies."""
    accepted: List[Dependency] = field(default_factory=list)
    rejected: List[RejectedSuggestion] = field(default_factory=list)
    threshold: float = 0.7
    summary: str = ""
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": [d.to_dict() for d in self.accepted],
            "rejected": [r.to_dict() for r in self.rejected],
            "threshold": self.threshold,
            "summary": self.summary,
            "recommendations": list(self.recommendations),
        }


def extract_json_block(text: str) -> str:
    """Strip a ```json (or bare ```) fence around a model response."""
    if "```json" in text:
        return text.split("```json", 1)[1].split("```", 1)[0].strip()
    if "```" in text:
        return text.split("```", 2)[1].strip()
    return text.strip()


def filter_suggestions(
    suggestions: Iterable[Union[DetectedDependency, Dict[str, Any]]],
    feature_ids: Collection[str],
    threshold: Optional[float] = None,
    default_confidence: float = DEFAULT_CONFIDENCE,
) -> SuggestionIntake:
    """
    Apply the acceptance policy to proposed dependencies.

    Args:
        suggestions: DetectedDependency models or raw dicts
        feature_ids: Ids of the features in the current snapshot
        threshold: Minimum confidence (exclusive); defaults to config
        default_confidence: Confidence for entries that carry none

    Returns:
        SuggestionIntake with accepted Dependency records (auto_detected=True)
    """
    policy = get_config().suggestions
    if threshold is None:
        threshold = policy.confidence_threshold
    known = set(feature_ids)
    intake = SuggestionIntake(threshold=threshold)

    for raw in suggestions:
        if isinstance(raw, DetectedDependency):
            item = raw
        else:
            try:
                item = DetectedDependency.model_validate(raw)
            except ValidationError as e:
                first = e.errors()[0]
                where = ".".join(str(p) for p in first.get("loc", ()))
                intake.rejected.append(RejectedSuggestion(
                    suggestion=dict(raw) if isinstance(raw, dict) else {"value": repr(raw)},
                    reason=f"invalid {where}: {first.get('msg', 'validation error')}",
                ))
                continue

        record = item.model_dump(mode="json")
        confidence = item.confidence_score if item.confidence_score is not None else default_confidence

        reason = None
        if item.from_feature_id not in known:
            reason = f"unknown feature {item.from_feature_id!r}"
        elif item.to_feature_id not in known:
            reason = f"unknown feature {item.to_feature_id!r}"
        elif item.from_feature_id == item.to_feature_id:
            reason = "self dependency"
        elif not confidence > threshold:
            reason = f"confidence {confidence:.2f} not above threshold {threshold:.2f}"

        if reason is not None:
            logger.debug(f"Rejected suggestion {item.from_feature_id} -> {item.to_feature_id}: {reason}")
            intake.rejected.append(RejectedSuggestion(suggestion=record, reason=reason))
            continue

        intake.accepted.append(Dependency(
            from_feature_id=item.from_feature_id,
            to_feature_id=item.to_feature_id,
            dependency_type=item.dependency_type,
            strength=item.strength,
            reason=item.reason,
            confidence=confidence,
            auto_detected=True,
        ))

    logger.info(
        f"Suggestion intake: {len(intake.accepted)} accepted, "
        f"{len(intake.rejected)} rejected (threshold {threshold})"
    )
    return intake


def parse_dependency_response(
    text: str,
    feature_ids: Collection[str],
    threshold: Optional[float] = None,
) -> SuggestionIntake:
    """
    Parse an AI dependency-analysis response into accepted dependencies.

    Raises:
        SuggestionParseError: if the response is not JSON or not an analysis
    """
    payload = extract_json_block(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse AI response: {e}")
        raise SuggestionParseError(f"Invalid JSON response: {e}") from e

    try:
        response = DependencyAnalysisResponse.model_validate(data)
    except ValidationError as e:
        logger.warning(f"AI response does not match analysis schema: {e.error_count()} error(s)")
        raise SuggestionParseError(f"Invalid analysis response: {e}") from e

    default_confidence = (
        response.confidence if response.confidence is not None else DEFAULT_CONFIDENCE
    )
    intake = filter_suggestions(
        response.dependencies,
        feature_ids,
        threshold=threshold,
        default_confidence=default_confidence,
    )
    intake.summary = response.analysis_summary
    intake.recommendations = list(response.recommendations)
    return intake
