"""
suggestions/ - Intake of AI-proposed dependencies.
"""

from .schemas import DetectedDependency, DependencyAnalysisResponse
from .intake import (
    DEFAULT_CONFIDENCE,
    RejectedSuggestion,
    SuggestionIntake,
    SuggestionParseError,
    extract_json_block,
    filter_suggestions,
    parse_dependency_response,
)

__all__ = [
    "DetectedDependency",
    "DependencyAnalysisResponse",
    "DEFAULT_CONFIDENCE",
    "RejectedSuggestion",
    "SuggestionIntake",
    "SuggestionParseError",
    "extract_json_block",
    "filter_suggestions",
    "parse_dependency_response",
]
