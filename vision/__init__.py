"""Vision package exports."""

from vision.boxes import BoxValidationError, NormalizedBox, iou
from vision.confidence import ConfidenceSummary, aggregate_detections, summarize
from vision.detections import DetectionEvent, DetectionResult, detection_from_payload
from vision.pixels import ImageSize, PixelRect, from_pixels, to_pixels

__all__ = [
    "BoxValidationError",
    "ConfidenceSummary",
    "DetectionEvent",
    "DetectionResult",
    "ImageSize",
    "NormalizedBox",
    "PixelRect",
    "aggregate_detections",
    "detection_from_payload",
    "from_pixels",
    "iou",
    "summarize",
    "to_pixels",
]
