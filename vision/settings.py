"""Filter pipeline settings loaded from the YAML configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from config.controller import ConfigController

SUPPRESSION_MODES = ("greedy", "nms", "none")


@dataclass(frozen=True)
class DetectionFilterSettings:
    """Thresholds applied by ``vision.filters.clean_detections``."""

    min_confidence: float = 0.0
    allowed_classes: tuple[str, ...] = ()
    min_area: float = 0.001
    max_area: float = 1.0
    min_aspect_ratio: float = 0.1
    max_aspect_ratio: float = 10.0
    max_detections: int = 100
    suppression: str = "greedy"
    iou_threshold: float = 0.5

    def __post_init__(self) -> None:
        if self.suppression not in SUPPRESSION_MODES:
            raise ValueError(
                f"suppression must be one of {', '.join(SUPPRESSION_MODES)}, got {self.suppression!r}"
            )

    @classmethod
    def from_mapping(cls, section: Mapping[str, Any]) -> "DetectionFilterSettings":
        defaults = cls()
        classes_value = section.get("allowed_classes")
        if isinstance(classes_value, (list, tuple)):
            classes = tuple(str(item) for item in classes_value)
        else:
            classes = defaults.allowed_classes

        def value(key: str) -> Any:
            found = section.get(key)
            return getattr(defaults, key) if found is None else found

        return cls(
            min_confidence=float(value("min_confidence")),
            allowed_classes=classes,
            min_area=float(value("min_area")),
            max_area=float(value("max_area")),
            min_aspect_ratio=float(value("min_aspect_ratio")),
            max_aspect_ratio=float(value("max_aspect_ratio")),
            max_detections=int(value("max_detections")),
            suppression=str(value("suppression")).lower(),
            iou_threshold=float(value("iou_threshold")),
        )


def load_filter_settings() -> DetectionFilterSettings:
    """Read the ``detection_filter`` section of the active configuration."""

    config = ConfigController.get_instance().get_config()
    return DetectionFilterSettings.from_mapping(config.get("detection_filter") or {})
