"""Detection result schemas and parsing of raw detector payloads.

Boxes are normalized to the source frame dimensions. Raw payloads from a
detector may describe the box as a ``bbox`` sequence ``(x, y, w, h)``, as
``xmin/ymin/xmax/ymax`` corners, or as flat ``x/y/w/h`` keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, Iterable

from core.logging import log_warning
from vision.boxes import NormalizedBox

_LABEL_KEYS = ("label", "class_name", "class", "name")
_CONFIDENCE_KEYS = ("confidence", "score")
_BOX_KEYS = ("bbox", "box", "rect", "rectangle")
_FLAT_BOX_KEYS = ("x", "y", "w", "h", "width", "height", "xmin", "ymin", "xmax", "ymax")
_KNOWN_KEYS = frozenset(_LABEL_KEYS + _CONFIDENCE_KEYS + _BOX_KEYS + _FLAT_BOX_KEYS + ("id", "identifier", "metadata"))


@dataclass(frozen=True)
class DetectionResult:
    """Single object detection: label, score and normalized box."""

    class_name: str
    confidence: float
    box: NormalizedBox
    identifier: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "class_name": self.class_name,
            "confidence": self.confidence,
            "box": self.box.to_dict(),
        }
        if self.identifier is not None:
            payload["identifier"] = self.identifier
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload


@dataclass(frozen=True)
class DetectionEvent:
    """Detections for one processed frame or image."""

    timestamp_ms: int
    detections: list[DetectionResult]
    frame_id: int | None = None
    source: str = "detector"


def detection_from_payload(raw: Any) -> DetectionResult | None:
    """Parse one raw detector output, returning ``None`` when unusable."""

    if isinstance(raw, DetectionResult):
        return raw

    payload = _to_mapping(raw)
    if payload is None:
        return None

    box = _extract_box(payload)
    if box is None:
        return None

    identifier = payload.get("identifier", payload.get("id"))
    metadata = {k: v for k, v in payload.items() if k not in _KNOWN_KEYS}
    nested = payload.get("metadata")
    if isinstance(nested, dict):
        metadata = {**nested, **metadata}
    return DetectionResult(
        class_name=_extract_label(payload),
        confidence=_extract_confidence(payload),
        box=box,
        identifier=str(identifier) if identifier is not None else None,
        metadata=metadata,
    )


def detections_from_payloads(items: Iterable[Any]) -> list[DetectionResult]:
    """Parse raw detector outputs, skipping the ones that cannot be read."""

    results: list[DetectionResult] = []
    skipped = 0
    for raw in items:
        detection = detection_from_payload(raw)
        if detection is None:
            skipped += 1
            continue
        results.append(detection)
    if skipped:
        log_warning(f"Skipped {skipped} unreadable detection payload(s)")
    return results


def _to_mapping(raw: Any) -> dict[str, Any] | None:
    if isinstance(raw, dict):
        return raw

    mapping: dict[str, Any] = {}
    for name in _KNOWN_KEYS:
        if hasattr(raw, name):
            mapping[name] = getattr(raw, name)

    return mapping or None


def _extract_confidence(payload: dict[str, Any]) -> float:
    value = payload.get("confidence", payload.get("score", 0.0))
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(confidence) or math.isinf(confidence):
        return 0.0
    return max(0.0, min(1.0, confidence))


def _extract_label(payload: dict[str, Any]) -> str:
    value = None
    for key in _LABEL_KEYS:
        if payload.get(key) is not None:
            value = payload[key]
            break
    label = str(value).strip() if value is not None else "unknown"
    return label or "unknown"


def _extract_box(payload: dict[str, Any]) -> NormalizedBox | None:
    raw_box = None
    for key in _BOX_KEYS:
        if payload.get(key) is not None:
            raw_box = payload[key]
            break

    if isinstance(raw_box, NormalizedBox):
        return raw_box

    if isinstance(raw_box, dict):
        return _extract_box(raw_box)

    if isinstance(raw_box, (list, tuple)):
        if len(raw_box) < 4:
            return None
        values = [_to_finite_float(item) for item in raw_box[:4]]
        if None in values:
            return None
        return NormalizedBox(*values)

    if {"xmin", "ymin", "xmax", "ymax"}.issubset(payload.keys()):
        corners = [_to_finite_float(payload[key]) for key in ("xmin", "ymin", "xmax", "ymax")]
        if None in corners:
            return None
        return NormalizedBox.from_xyxy(*corners)

    if "x" not in payload or "y" not in payload:
        return None
    x = _to_finite_float(payload.get("x"))
    y = _to_finite_float(payload.get("y"))
    w = _to_finite_float(payload.get("w", payload.get("width")))
    h = _to_finite_float(payload.get("h", payload.get("height")))
    if None in (x, y, w, h):
        return None
    return NormalizedBox(x, y, w, h)


def _to_finite_float(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
