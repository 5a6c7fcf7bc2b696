"""Batch filters over detection results.

``remove_duplicates`` is a greedy pass in input order: the earlier of two
overlapping detections survives regardless of confidence. Use
``apply_nms`` when the highest-confidence detection should win instead.
Both compare every candidate against the accepted set, so callers should
bound the input with ``top_k`` first.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
import math

from core.logging import logger
from vision.detections import DetectionEvent, DetectionResult
from vision.settings import DetectionFilterSettings


def filter_by_area(
    results: Iterable[DetectionResult],
    min_area: float = 0.001,
    max_area: float = 1.0,
) -> list[DetectionResult]:
    return [item for item in results if min_area <= item.box.area <= max_area]


def filter_by_aspect_ratio(
    results: Iterable[DetectionResult],
    min_ratio: float = 0.1,
    max_ratio: float = 10.0,
) -> list[DetectionResult]:
    return [item for item in results if min_ratio <= item.box.aspect_ratio <= max_ratio]


def filter_by_confidence(
    results: Iterable[DetectionResult],
    threshold: float = 0.5,
) -> list[DetectionResult]:
    return [item for item in results if item.confidence >= threshold]


def filter_by_class(
    results: Iterable[DetectionResult],
    allowed_classes: Iterable[str],
) -> list[DetectionResult]:
    allowed = set(allowed_classes)
    return [item for item in results if item.class_name in allowed]


def top_k(results: Iterable[DetectionResult], k: int) -> list[DetectionResult]:
    """Keep the ``k`` most confident results, returned in input order."""

    items = list(results)
    if k <= 0:
        return []
    if len(items) <= k:
        return items
    ranked = sorted(range(len(items)), key=lambda index: items[index].confidence, reverse=True)
    keep = sorted(ranked[:k])
    return [items[index] for index in keep]


def remove_duplicates(
    results: Iterable[DetectionResult],
    threshold: float = 0.5,
) -> list[DetectionResult]:
    """Drop each result overlapping an earlier accepted one above ``threshold``."""

    accepted: list[DetectionResult] = []
    for candidate in results:
        duplicate = any(
            kept.box.intersection_over_union(candidate.box) > threshold for kept in accepted
        )
        if not duplicate:
            accepted.append(candidate)
    return accepted


def apply_nms(
    results: Iterable[DetectionResult],
    iou_threshold: float = 0.5,
) -> list[DetectionResult]:
    """Confidence-ordered non-maximum suppression."""

    remaining = sorted(results, key=lambda item: item.confidence, reverse=True)
    selected: list[DetectionResult] = []
    while remaining:
        best = remaining.pop(0)
        selected.append(best)
        remaining = [
            item
            for item in remaining
            if best.box.intersection_over_union(item.box) <= iou_threshold
        ]
    return selected


def cluster_by_center(
    results: Iterable[DetectionResult],
    max_distance: float = 0.1,
) -> list[DetectionResult]:
    """Group results whose centers lie near a seed; keep each group's best."""

    remaining = list(results)
    representatives: list[DetectionResult] = []
    while remaining:
        seed = remaining.pop(0)
        cluster = [seed]
        outside: list[DetectionResult] = []
        for item in remaining:
            if seed.box.distance_to_center(item.box) < max_distance:
                cluster.append(item)
            else:
                outside.append(item)
        remaining = outside
        representatives.append(max(cluster, key=lambda item: item.confidence))
    return representatives


def _confidence_moments(results: Sequence[DetectionResult]) -> tuple[float, float]:
    confidences = [item.confidence for item in results]
    mean = sum(confidences) / len(confidences)
    variance = sum((value - mean) ** 2 for value in confidences) / len(confidences)
    return mean, math.sqrt(variance)


def filter_outliers(
    results: Sequence[DetectionResult],
    standard_deviations: float = 2.0,
) -> list[DetectionResult]:
    """Keep results whose confidence lies within ``mean ± k·σ``."""

    if len(results) <= 1:
        return list(results)
    mean, std_dev = _confidence_moments(results)
    lower = mean - standard_deviations * std_dev
    upper = mean + standard_deviations * std_dev
    return [item for item in results if lower <= item.confidence <= upper]


def filter_with_adaptive_threshold(results: Sequence[DetectionResult]) -> list[DetectionResult]:
    """Keep results scoring at least half a deviation below the mean."""

    if len(results) <= 1:
        return list(results)
    mean, std_dev = _confidence_moments(results)
    threshold = mean - std_dev * 0.5
    logger.debug("Adaptive confidence threshold %.3f", threshold)
    return [item for item in results if item.confidence >= threshold]


def filter_by_probability_distance(
    results: Sequence[DetectionResult],
    min_distance: float = 0.1,
) -> list[DetectionResult]:
    """Keep results whose score sits at least ``min_distance`` below the last kept one.

    Results are expected in descending confidence order. The first result is
    compared against a score of ``1.0``.
    """

    if len(results) <= 1:
        return list(results)

    kept: list[DetectionResult] = []
    last_confidence = 1.0
    for item in results:
        if last_confidence - item.confidence >= min_distance:
            kept.append(item)
            last_confidence = item.confidence
    logger.debug("Probability distance filter kept %d of %d", len(kept), len(results))
    return kept


def clean_detections(
    results: Iterable[DetectionResult],
    settings: DetectionFilterSettings | None = None,
) -> list[DetectionResult]:
    """Run the configured filter stages followed by overlap suppression."""

    if settings is None:
        settings = DetectionFilterSettings()

    current = list(results)
    logger.debug("Cleaning %d detections", len(current))

    current = _logged("confidence", current, filter_by_confidence(current, settings.min_confidence))
    if settings.allowed_classes:
        current = _logged("class", current, filter_by_class(current, settings.allowed_classes))
    current = _logged("area", current, filter_by_area(current, settings.min_area, settings.max_area))
    current = _logged(
        "aspect_ratio",
        current,
        filter_by_aspect_ratio(current, settings.min_aspect_ratio, settings.max_aspect_ratio),
    )
    if settings.max_detections > 0:
        current = _logged("top_k", current, top_k(current, settings.max_detections))

    if settings.suppression == "greedy":
        current = _logged("duplicates", current, remove_duplicates(current, settings.iou_threshold))
    elif settings.suppression == "nms":
        current = _logged("nms", current, apply_nms(current, settings.iou_threshold))
    return current


def _logged(
    stage: str,
    before: list[DetectionResult],
    after: list[DetectionResult],
) -> list[DetectionResult]:
    logger.debug("Filter stage %s: %d -> %d detections", stage, len(before), len(after))
    return after


def clean_events(
    events: Iterable[DetectionEvent],
    settings: DetectionFilterSettings | None = None,
) -> list[DetectionEvent]:
    """Clean the detections of every event, keeping frame and source info."""

    return [
        replace(event, detections=clean_detections(event.detections, settings))
        for event in events
    ]
