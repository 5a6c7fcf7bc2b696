"""Tests for detection set filters and the cleaning pipeline."""

from __future__ import annotations

import random

import pytest

from vision.boxes import NormalizedBox, iou
from vision.detections import DetectionEvent, DetectionResult
from vision.filters import (
    apply_nms,
    clean_detections,
    clean_events,
    cluster_by_center,
    filter_by_area,
    filter_by_aspect_ratio,
    filter_by_class,
    filter_by_confidence,
    filter_by_probability_distance,
    filter_outliers,
    filter_with_adaptive_threshold,
    remove_duplicates,
    top_k,
)
from vision.settings import DetectionFilterSettings


def _det(
    confidence: float,
    x: float = 0.1,
    y: float = 0.1,
    w: float = 0.2,
    h: float = 0.2,
    class_name: str = "grain",
) -> DetectionResult:
    return DetectionResult(class_name, confidence, NormalizedBox(x, y, w, h))


def test_filter_by_area_is_inclusive() -> None:
    exact = _det(0.5, w=0.25, h=0.25)
    large = _det(0.5, x=0.0, y=0.0, w=0.5, h=0.5)
    assert filter_by_area([exact, large], min_area=0.0625, max_area=0.0625) == [exact]


def test_filter_by_area_defaults_drop_specks() -> None:
    speck = _det(0.9, w=0.01, h=0.01)
    grain = _det(0.9)
    assert filter_by_area([speck, grain]) == [grain]


def test_filter_by_aspect_ratio_defaults() -> None:
    flat = _det(0.5, w=0.2, h=0.0)
    sliver = _det(0.5, w=0.5, h=0.04)
    normal = _det(0.5, w=0.5, h=0.25)
    assert filter_by_aspect_ratio([flat, sliver, normal]) == [normal]


def test_filter_by_confidence_and_class() -> None:
    weak = _det(0.2)
    strong = _det(0.8)
    pore = _det(0.9, class_name="pore")
    assert filter_by_confidence([weak, strong, pore]) == [strong, pore]
    assert filter_by_confidence([weak, strong], threshold=0.2) == [weak, strong]
    assert filter_by_class([weak, strong, pore], {"pore"}) == [pore]
    assert filter_by_class([weak, pore], ["Pore"]) == []


def test_top_k_keeps_most_confident_in_input_order() -> None:
    items = [_det(0.7), _det(0.2), _det(0.9), _det(0.5)]
    assert [item.confidence for item in top_k(items, 2)] == [0.7, 0.9]
    assert top_k(items, 10) == items
    assert top_k(items, 0) == []


def test_remove_duplicates_keeps_earlier_detection() -> None:
    first = _det(0.9, x=0.1, y=0.1, w=0.4, h=0.4)
    second = _det(0.8, x=0.12, y=0.12, w=0.4, h=0.4)
    assert iou(first.box, second.box) > 0.5
    assert remove_duplicates([first, second], threshold=0.5) == [first]


def test_remove_duplicates_ignores_confidence() -> None:
    weak = _det(0.3, x=0.1, y=0.1, w=0.4, h=0.4)
    strong = _det(0.95, x=0.12, y=0.12, w=0.4, h=0.4)
    kept = remove_duplicates([weak, strong])
    assert kept == [weak]
    assert kept[0].confidence == 0.3


def test_remove_duplicates_keeps_overlap_equal_to_threshold() -> None:
    a = _det(0.5)
    b = _det(0.6)
    assert len(remove_duplicates([a, b], threshold=1.0)) == 2
    assert len(remove_duplicates([a, b], threshold=0.99)) == 1


def test_remove_duplicates_leaves_no_overlapping_pair() -> None:
    rng = random.Random(23)
    for threshold in (0.1, 0.3, 0.5, 0.8):
        items = [
            _det(rng.random(), rng.uniform(0, 0.8), rng.uniform(0, 0.8), rng.uniform(0.05, 0.3), rng.uniform(0.05, 0.3))
            for _ in range(40)
        ]
        kept = remove_duplicates(items, threshold)
        assert len(kept) <= len(items)
        for index, a in enumerate(kept):
            for b in kept[index + 1:]:
                assert iou(a.box, b.box) <= threshold


def test_apply_nms_prefers_highest_confidence() -> None:
    weak = _det(0.3, x=0.1, y=0.1, w=0.4, h=0.4)
    strong = _det(0.95, x=0.12, y=0.12, w=0.4, h=0.4)
    apart = _det(0.6, x=0.7, y=0.7, w=0.2, h=0.2)
    assert apply_nms([weak, apart, strong]) == [strong, apart]
    assert apply_nms([]) == []


def test_cluster_by_center_keeps_best_member() -> None:
    a = _det(0.4, x=0.10, y=0.10, w=0.1, h=0.1)
    b = _det(0.9, x=0.12, y=0.11, w=0.1, h=0.1)
    c = _det(0.6, x=0.13, y=0.13, w=0.1, h=0.1)
    far = _det(0.2, x=0.7, y=0.7, w=0.1, h=0.1)
    assert cluster_by_center([a, far, b, c], max_distance=0.1) == [b, far]
    assert cluster_by_center([]) == []


def test_filter_outliers_drops_far_confidences() -> None:
    items = [_det(0.5) for _ in range(9)] + [_det(0.0)]
    kept = filter_outliers(items, standard_deviations=2.0)
    assert len(kept) == 9
    assert all(item.confidence == 0.5 for item in kept)
    single = [_det(0.1)]
    assert filter_outliers(single) == single


def test_adaptive_threshold() -> None:
    items = [_det(0.9), _det(0.8), _det(0.1)]
    assert [item.confidence for item in filter_with_adaptive_threshold(items)] == [0.9, 0.8]
    assert filter_with_adaptive_threshold(items[:1]) == items[:1]


def test_probability_distance_keeps_well_separated_scores() -> None:
    items = [_det(0.85), _det(0.6), _det(0.55), _det(0.3)]
    kept = filter_by_probability_distance(items)
    assert [item.confidence for item in kept] == [0.85, 0.6, 0.3]


def test_probability_distance_compares_first_score_against_one() -> None:
    items = [_det(0.97), _det(0.5)]
    assert [item.confidence for item in filter_by_probability_distance(items)] == [0.5]
    assert filter_by_probability_distance(items, min_distance=0.0) == items


def test_probability_distance_leaves_single_result_alone() -> None:
    single = [_det(0.99)]
    assert filter_by_probability_distance(single) == single
    assert filter_by_probability_distance([]) == []


def _pipeline_input() -> list[DetectionResult]:
    return [
        _det(0.4, x=0.1, y=0.1, w=0.4, h=0.4),
        _det(0.9, x=0.12, y=0.12, w=0.4, h=0.4),
        _det(0.95, x=0.6, y=0.6, w=0.01, h=0.01),
        _det(0.8, x=0.6, y=0.1, w=0.3, h=0.3, class_name="pore"),
        _det(0.1, x=0.1, y=0.7, w=0.2, h=0.2),
    ]


def test_clean_detections_greedy() -> None:
    settings = DetectionFilterSettings(min_confidence=0.3, suppression="greedy")
    kept = clean_detections(_pipeline_input(), settings)
    assert [(item.class_name, item.confidence) for item in kept] == [("grain", 0.4), ("pore", 0.8)]


def test_clean_detections_nms() -> None:
    settings = DetectionFilterSettings(min_confidence=0.3, suppression="nms")
    kept = clean_detections(_pipeline_input(), settings)
    assert [(item.class_name, item.confidence) for item in kept] == [("grain", 0.9), ("pore", 0.8)]


def test_clean_detections_class_and_limit() -> None:
    settings = DetectionFilterSettings(
        min_confidence=0.0,
        allowed_classes=("grain",),
        suppression="none",
        max_detections=2,
    )
    kept = clean_detections(_pipeline_input(), settings)
    assert [item.confidence for item in kept] == [0.4, 0.9]


def test_clean_detections_default_settings() -> None:
    kept = clean_detections(_pipeline_input())
    assert [item.confidence for item in kept] == [0.4, 0.8, 0.1]


def test_invalid_suppression_mode() -> None:
    with pytest.raises(ValueError):
        DetectionFilterSettings(suppression="soft")


def test_clean_events_returns_new_events() -> None:
    events = [
        DetectionEvent(timestamp_ms=10, detections=_pipeline_input(), frame_id=1, source="camera"),
        DetectionEvent(timestamp_ms=20, detections=[]),
    ]
    settings = DetectionFilterSettings(min_confidence=0.3, suppression="nms")

    cleaned = clean_events(events, settings)

    assert len(cleaned) == 2
    assert (cleaned[0].timestamp_ms, cleaned[0].frame_id, cleaned[0].source) == (10, 1, "camera")
    assert [item.confidence for item in cleaned[0].detections] == [0.9, 0.8]
    assert cleaned[1].detections == []
    assert len(events[0].detections) == 5
    assert cleaned[0] is not events[0]
