"""Normalized bounding boxes and the geometry operations over them.

Boxes are expressed as ``(x, y, width, height)`` fractions of an implicit
unit image frame. Construction repairs out-of-range input by clamping so
that every box satisfies ``0 <= x``, ``0 <= y``, ``x + width <= 1`` and
``y + height <= 1``. Every transform returns a new box.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Mapping

from core.logging import logger

EQUALITY_TOLERANCE = 1e-3
FRAME_SLACK = 1e-6


class BoxValidationError(ValueError):
    """Raised by the strict constructor when input is not a valid box."""


def _finite_or_zero(value: float) -> float:
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _first_number(payload: Mapping[str, Any], *keys: str) -> float:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return float(value)
    return 0.0


@dataclass(frozen=True, eq=False)
class NormalizedBox:
    """Axis-aligned rectangle in normalized image coordinates."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        x = _clamp(_finite_or_zero(self.x), 0.0, 1.0)
        y = _clamp(_finite_or_zero(self.y), 0.0, 1.0)
        width = _clamp(_finite_or_zero(self.width), 0.0, 1.0 - x)
        height = _clamp(_finite_or_zero(self.height), 0.0, 1.0 - y)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "height", height)

    @classmethod
    def validated(cls, x: float, y: float, width: float, height: float) -> "NormalizedBox":
        """Build a box, raising ``BoxValidationError`` instead of clamping."""

        values = {"x": x, "y": y, "width": width, "height": height}
        for name, value in values.items():
            try:
                number = float(value)
            except (TypeError, ValueError) as exc:
                raise BoxValidationError(f"{name} is not a number: {value!r}") from exc
            if math.isnan(number) or math.isinf(number):
                raise BoxValidationError(f"{name} must be finite, got {number}")
            if number < 0.0 or number > 1.0:
                raise BoxValidationError(f"{name} must lie in [0, 1], got {number}")
        if float(x) + float(width) > 1.0 + FRAME_SLACK:
            raise BoxValidationError(f"box extends past the right edge: x + width = {float(x) + float(width)}")
        if float(y) + float(height) > 1.0 + FRAME_SLACK:
            raise BoxValidationError(f"box extends past the bottom edge: y + height = {float(y) + float(height)}")
        return cls(float(x), float(y), float(width), float(height))

    @classmethod
    def zero(cls) -> "NormalizedBox":
        return cls(0.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "NormalizedBox":
        """Build a box from corner coordinates."""

        return cls(x1, y1, x2 - x1, y2 - y1)

    @classmethod
    def from_center(cls, center_x: float, center_y: float, width: float, height: float) -> "NormalizedBox":
        """Build a box from center coordinates and size."""

        return cls(center_x - width / 2, center_y - height / 2, width, height)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "NormalizedBox":
        """Build a box from ``x/y/width/height`` keys; missing or null keys read as zero."""

        return cls(
            _first_number(payload, "x"),
            _first_number(payload, "y"),
            _first_number(payload, "width", "w"),
            _first_number(payload, "height", "h"),
        )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> tuple[float, float]:
        return (self.center_x, self.center_y)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Width over height, or ``0.0`` for a zero-height box."""

        if self.height <= 0:
            return 0.0
        return self.width / self.height

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)

    def as_xyxy(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.right, self.bottom)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    def intersection_over_union(self, other: "NormalizedBox") -> float:
        """Return the IoU with ``other`` in ``[0, 1]``."""

        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)

        if right <= left or bottom <= top:
            return 0.0

        intersection = (right - left) * (bottom - top)
        union = self.area + other.area - intersection
        if union <= 0:
            return 0.0
        return min(1.0, intersection / union)

    def contains(self, other: "NormalizedBox") -> bool:
        """Return whether ``other`` lies inside this box, edges included."""

        return (
            other.x >= self.x
            and other.y >= self.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def intersects(self, other: "NormalizedBox") -> bool:
        """Return whether the boxes overlap; touching edges count."""

        return not (
            self.right < other.x
            or other.right < self.x
            or self.bottom < other.y
            or other.bottom < self.y
        )

    def distance_to_center(self, other: "NormalizedBox") -> float:
        return math.hypot(self.center_x - other.center_x, self.center_y - other.center_y)

    def expanded(self, factor: float) -> "NormalizedBox":
        """Scale the box about its center; ``factor < 1`` shrinks it."""

        width_delta = (self.width * factor - self.width) / 2
        height_delta = (self.height * factor - self.height) / 2
        return NormalizedBox(
            max(0.0, self.x - width_delta),
            max(0.0, self.y - height_delta),
            self.width * factor,
            self.height * factor,
        )

    def shrunk(self, factor: float) -> "NormalizedBox":
        """Scale the box down about its center; ``0`` collapses it to a point."""

        scaled_width = self.width * factor
        scaled_height = self.height * factor
        return NormalizedBox(
            self.x + (self.width - scaled_width) / 2,
            self.y + (self.height - scaled_height) / 2,
            scaled_width,
            scaled_height,
        )

    def translated(self, dx: float, dy: float) -> "NormalizedBox":
        return NormalizedBox(self.x + dx, self.y + dy, self.width, self.height)

    def clipped(self) -> "NormalizedBox":
        return NormalizedBox(self.x, self.y, self.width, self.height)

    def rotated(self, degrees: float) -> "NormalizedBox":
        """Rotate the frame by a multiple of 90 degrees.

        Other angles leave the box unchanged.
        """

        normalized = degrees % 360
        x, y, w, h = self.as_tuple()
        if normalized == 90:
            return NormalizedBox(1 - y - h, x, h, w)
        if normalized == 180:
            return NormalizedBox(1 - x - w, 1 - y - h, w, h)
        if normalized == 270:
            return NormalizedBox(y, 1 - x - w, h, w)
        if normalized != 0:
            logger.debug("Ignoring unsupported rotation of %s degrees", degrees)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NormalizedBox):
            return NotImplemented
        return (
            abs(self.x - other.x) < EQUALITY_TOLERANCE
            and abs(self.y - other.y) < EQUALITY_TOLERANCE
            and abs(self.width - other.width) < EQUALITY_TOLERANCE
            and abs(self.height - other.height) < EQUALITY_TOLERANCE
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"NormalizedBox(x={self.x:.3f}, y={self.y:.3f}, w={self.width:.3f}, h={self.height:.3f})"


def iou(a: NormalizedBox, b: NormalizedBox) -> float:
    """Intersection over union of two boxes."""

    return a.intersection_over_union(b)
