"""
suggestions/schemas.py - Pydantic response models

Structured schemas for AI dependency-analysis responses. Each proposed
dependency is validated on its own so one malformed entry does not discard
the whole response.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from featuregraph.core.enums import DependencyStrength, DependencyType


class DetectedDependency(BaseModel):
    """One dependency proposed by the AI service."""

    from_feature_id: str = Field(..., min_length=1, description="Prerequisite feature id")
    to_feature_id: str = Field(..., min_length=1, description="Dependent feature id")
    dependency_type: DependencyType = Field(
        ...,
        validation_alias=AliasChoices("dependency_type", "type"),
        description="technical | logical | business",
    )
    strength: DependencyStrength = Field(..., description="required | recommended | optional")
    reason: Optional[str] = Field(None, description="Why the dependency exists")
    confidence_score: Optional[float] = Field(
        None,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("confidence_score", "confidence"),
        description="Model certainty (0-1)",
    )

    @field_validator("dependency_type", "strength", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class DependencyAnalysisResponse(BaseModel):
    """Envelope of a dependency-analysis response."""

    dependencies: List[Dict[str, Any]] = Field(default_factory=list)
    analysis_summary: str = Field(default="", description="Overall analysis summary")
    recommendations: List[str] = Field(default_factory=list)
    confidence: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="Response-level confidence"
    )
