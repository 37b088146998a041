"""
core/models.py - Feature and dependency records

Immutable input records consumed by the Graph Store. Plain JSON objects
(from the UI or an AI suggestion service) are converted with from_dict(),
which coerces enum fields from their string values.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Type, TypeVar
from enum import Enum

from .enums import DependencyStrength, DependencyType, Priority


E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: Type[E], value: Any) -> E:
    """Convert an enum member or its (case-insensitive) string value."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"Invalid {enum_cls.__name__} {value!r} (expected one of: {allowed})")


@dataclass(frozen=True)
class Feature:
    """A unit of work that can be built once its prerequisites exist."""
    id: str
    name: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    complexity: int = 1

    @property
    def weight(self) -> int:
        """Scheduling weight, equal to complexity (1..10)."""
        return self.complexity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "priority": self.priority.value,
            "complexity": self.complexity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Feature":
        if "id" not in data:
            raise ValueError("Feature record has no 'id'")
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description") or "",
            priority=coerce_enum(Priority, data.get("priority", Priority.MEDIUM)),
            complexity=data.get("complexity", 1),
        )


@dataclass(frozen=True)
class Dependency:
    """
    Directed edge: from_feature_id must exist before to_feature_id is built.
    """
    from_feature_id: str
    to_feature_id: str
    dependency_type: DependencyType = DependencyType.TECHNICAL
    strength: DependencyStrength = DependencyStrength.REQUIRED
    reason: Optional[str] = None
    confidence: float = 1.0
    auto_detected: bool = False

    @property
    def pair(self) -> Tuple[str, str]:
        return (self.from_feature_id, self.to_feature_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_feature_id": self.from_feature_id,
            "to_feature_id": self.to_feature_id,
            "dependency_type": self.dependency_type.value,
            "strength": self.strength.value,
            "reason": self.reason,
            "confidence": self.confidence,
            "auto_detected": self.auto_detected,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dependency":
        for key in ("from_feature_id", "to_feature_id"):
            if key not in data:
                raise ValueError(f"Dependency record has no {key!r}")
        # AI responses use "type" and "confidence_score"
        dep_type = data.get("dependency_type", data.get("type", DependencyType.TECHNICAL))
        confidence = data.get("confidence", data.get("confidence_score", 1.0))
        return cls(
            from_feature_id=data["from_feature_id"],
            to_feature_id=data["to_feature_id"],
            dependency_type=coerce_enum(DependencyType, dep_type),
            strength=coerce_enum(DependencyStrength, data.get("strength", DependencyStrength.REQUIRED)),
            reason=data.get("reason"),
            confidence=float(confidence),
            auto_detected=bool(data.get("auto_detected", False)),
        )
