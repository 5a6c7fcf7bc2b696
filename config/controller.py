"""Configuration controller for YAML-based settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

_LEGACY_FILTER_KEYS = {
    "min_confidence": ("detection_min_confidence", 0.0, float),
    "min_area": ("detection_min_area", 0.001, float),
    "max_area": ("detection_max_area", 1.0, float),
    "min_aspect_ratio": ("detection_min_aspect_ratio", 0.1, float),
    "max_aspect_ratio": ("detection_max_aspect_ratio", 10.0, float),
    "max_detections": ("detection_max_detections", 100, int),
    "iou_threshold": ("detection_iou_threshold", 0.5, float),
    "suppression": ("detection_suppression", "greedy", str),
}


@dataclass(frozen=True)
class ConfigPaths:
    """Filesystem paths for configuration files."""

    config_dir: Path
    config_file: Path
    override_file: Path


class ConfigController:
    """Singleton controller for loading and updating configuration."""

    _instance: "ConfigController | None" = None

    def __init__(self, config_file: str = "default.yaml") -> None:
        if ConfigController._instance is not None:
            raise RuntimeError("You cannot create another ConfigController class")

        config_dir = Path("config")
        self.paths = ConfigPaths(
            config_dir=config_dir,
            config_file=config_dir / config_file,
            override_file=config_dir / "override.yaml",
        )
        self.config: dict[str, Any] = {}
        self.load_config()

    @classmethod
    def get_instance(cls) -> "ConfigController":
        """Return the singleton instance of the controller."""

        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def load_instance(cls, config_file: str) -> "ConfigController":
        """Replace the singleton with one reading ``config_file``."""

        cls._instance = None
        cls._instance = cls(config_file)
        return cls._instance

    def load_config(self) -> None:
        """Load configuration from default and override YAML files."""

        with self.paths.config_file.open("r", encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}

        if self.paths.override_file.exists():
            with self.paths.override_file.open("r", encoding="utf-8") as file:
                override_config = yaml.safe_load(file) or {}
            if override_config:
                config = self._deep_merge(config, override_config)

        self.config = self._normalize_legacy_config(config)

    def save_config(self, config: dict[str, Any]) -> None:
        """Persist configuration to override.yaml, archiving previous overrides."""

        if self.paths.override_file.exists():
            archive_index = 1
            archive_file = self._archive_path(archive_index)
            while archive_file.exists():
                archive_index += 1
                archive_file = self._archive_path(archive_index)
            self.paths.override_file.rename(archive_file)

        with self.paths.override_file.open("w", encoding="utf-8") as file:
            yaml.safe_dump(config, file)

    def get_config(self) -> dict[str, Any]:
        """Return the currently loaded configuration."""

        return dict(self.config)

    def set_config(self, config: dict[str, Any]) -> None:
        """Set and persist configuration values."""

        self.config = dict(config)
        self.save_config(self.config)

    def _archive_path(self, index: int) -> Path:
        """Return the archive path for a given override index."""

        filename = f"override_{index:04d}.yaml"
        return self.paths.config_dir / filename

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge dictionaries, overriding base values with override values."""

        merged = dict(base)
        for key, value in override.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _normalize_legacy_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Fill the detection_filter section, honouring flat legacy keys."""

        normalized = dict(config)
        filter_cfg = dict(normalized.get("detection_filter") or {})

        for key, (legacy_key, default, cast) in _LEGACY_FILTER_KEYS.items():
            value = filter_cfg.get(key)
            if value is None:
                value = normalized.get(legacy_key)
            if value is None:
                value = default
            try:
                filter_cfg[key] = cast(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(
                    f"detection_filter.{key} must be {cast.__name__}, got {value!r}"
                ) from exc

        classes = filter_cfg.get("allowed_classes")
        if classes is None:
            classes = normalized.get("detection_allowed_classes")
        if isinstance(classes, str):
            classes = [item.strip() for item in classes.split(",") if item.strip()]
        filter_cfg["allowed_classes"] = list(classes or [])

        normalized["detection_filter"] = filter_cfg
        normalized["logging_level"] = str(normalized.get("logging_level", "INFO")).upper()
        return normalized
