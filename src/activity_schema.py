from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from image_io import EncodedImage


class ActivityKind(str, Enum):
    WALKING = "Walking"
    RUNNING = "Running"
    SWIMMING = "Swimming"
    CYCLING = "Cycling"
    STRENGTH = "Strength"
    YOGA = "Yoga"
    STEPS = "Steps"
    OTHER = "Other"


CANONICAL_LABELS: Dict[str, ActivityKind] = {
    kind.value: kind for kind in ActivityKind if kind is not ActivityKind.OTHER
}

ACTIVITY_COLORS: Dict[ActivityKind, str] = {
    ActivityKind.STEPS: "#10b981",
    ActivityKind.RUNNING: "#3b82f6",
    ActivityKind.CYCLING: "#f97316",
    ActivityKind.SWIMMING: "#06b6d4",
    ActivityKind.STRENGTH: "#a855f7",
    ActivityKind.YOGA: "#ec4899",
    ActivityKind.WALKING: "#6366f1",
    ActivityKind.OTHER: "#64748b",
}


def normalize_activity_kind(label: Any) -> ActivityKind:
    """Map a free-text label from the model onto the closed ActivityKind set.

    Matching is exact and case-sensitive; every other value becomes ``OTHER``.
    """
    if not isinstance(label, str):
        return ActivityKind.OTHER
    return CANONICAL_LABELS.get(label, ActivityKind.OTHER)


@dataclass(frozen=True)
class ActivityStat:
    label: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Structured data extracted from one fitness screenshot.

    ``primary_value`` is the headline metric (steps, distance, or duration in
    decimal minutes) and ``unit`` is its display label.
    """

    activity_kind: ActivityKind
    primary_value: float
    unit: str
    summary: str
    additional_stats: List[ActivityStat] = field(default_factory=list)
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the same field names as the response schema."""
        return {
            "activityType": self.activity_kind.value,
            "primaryValue": self.primary_value,
            "unit": self.unit,
            "additionalStats": [stat.to_dict() for stat in self.additional_stats],
            "summary": self.summary,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    timestamp: datetime
    image: EncodedImage
    result: AnalysisResult

    def to_ui_dict(self) -> Dict[str, Any]:
        """
        Convert to the display fields used by the Analyze and History views.
        """
        result = self.result
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "date": self.timestamp.astimezone().strftime("%Y-%m-%d"),
            "activity": result.activity_kind.value,
            "color": ACTIVITY_COLORS[result.activity_kind],
            "primary_value": format_primary_value(result.primary_value),
            "unit": result.unit,
            "confidence": format_confidence(result.confidence),
            "summary": result.summary,
            "stats": [(stat.label, stat.value) for stat in result.additional_stats],
        }


def format_primary_value(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def format_confidence(confidence: Optional[float]) -> str:
    return f"{round((confidence or 0.0) * 100)}%"
