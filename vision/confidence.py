"""Confidence statistics for reporting detection results."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import math

from vision.detections import DetectionEvent

HIGH_CONFIDENCE = 0.7
MEDIUM_CONFIDENCE = 0.5


@dataclass(frozen=True)
class ConfidenceSummary:
    """Average, extremes and population standard deviation of scores.

    ``scores`` keeps the raw values in the order they were given.
    """

    average: float = 0.0
    maximum: float = 0.0
    minimum: float = 0.0
    standard_deviation: float = 0.0
    count: int = 0
    scores: tuple[float, ...] = ()

    @classmethod
    def summarize(cls, scores: Iterable[float]) -> "ConfidenceSummary":
        values = [float(score) for score in scores]
        if not values:
            return cls()

        average = sum(values) / len(values)
        variance = sum((value - average) ** 2 for value in values) / len(values)
        return cls(
            average=average,
            maximum=max(values),
            minimum=min(values),
            standard_deviation=math.sqrt(variance),
            count=len(values),
            scores=tuple(values),
        )

    @property
    def is_high_confidence(self) -> bool:
        return self.average >= HIGH_CONFIDENCE

    @property
    def is_medium_confidence(self) -> bool:
        return MEDIUM_CONFIDENCE <= self.average < HIGH_CONFIDENCE

    @property
    def is_low_confidence(self) -> bool:
        return self.average < MEDIUM_CONFIDENCE

    @property
    def tier(self) -> str:
        """``high``, ``medium`` or ``low`` based on the average score."""

        if self.is_high_confidence:
            return "high"
        if self.is_medium_confidence:
            return "medium"
        return "low"

    def to_dict(self) -> dict[str, object]:
        return {
            "average": self.average,
            "maximum": self.maximum,
            "minimum": self.minimum,
            "standard_deviation": self.standard_deviation,
            "count": self.count,
            "scores": list(self.scores),
            "tier": self.tier,
        }


def summarize(scores: Iterable[float]) -> ConfidenceSummary:
    """Summarize raw confidence scores; empty input gives all zeros."""

    return ConfidenceSummary.summarize(scores)


@dataclass(frozen=True)
class ClassDetectionStats:
    """Per-class detection counts and confidence range."""

    count: int
    average_confidence: float
    min_confidence: float
    max_confidence: float


@dataclass(frozen=True)
class AggregatedDetectionStats:
    """Detection totals across a batch of frames."""

    total_detections: int
    image_count: int
    class_stats: dict[str, ClassDetectionStats]


def aggregate_detections(events: Sequence[DetectionEvent]) -> AggregatedDetectionStats:
    """Group detections from every event by class and summarize each group."""

    by_class: dict[str, list[float]] = defaultdict(list)
    total = 0
    for event in events:
        for detection in event.detections:
            by_class[detection.class_name].append(detection.confidence)
            total += 1

    class_stats: dict[str, ClassDetectionStats] = {}
    for class_name, confidences in by_class.items():
        summary = ConfidenceSummary.summarize(confidences)
        class_stats[class_name] = ClassDetectionStats(
            count=summary.count,
            average_confidence=summary.average,
            min_confidence=summary.minimum,
            max_confidence=summary.maximum,
        )

    return AggregatedDetectionStats(
        total_detections=total,
        image_count=len(events),
        class_stats=class_stats,
    )
