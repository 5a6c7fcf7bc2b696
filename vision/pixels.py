"""Conversion between normalized boxes and pixel rectangles.

Pixel rectangles keep float coordinates; no rounding is applied until a
caller asks for ``PixelRect.as_int_tuple()``.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from vision.boxes import NormalizedBox

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*[xX]\s*(\d+)\s*$")


@dataclass(frozen=True)
class PixelRect:
    """Rectangle in absolute pixel coordinates."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def as_int_tuple(self) -> tuple[int, int, int, int]:
        """Return ``(x, y, width, height)`` rounded to whole pixels."""

        return (round(self.x), round(self.y), round(self.width), round(self.height))


@dataclass(frozen=True)
class ImageSize:
    """Pixel dimensions of the image a detector ran on."""

    width: int
    height: int

    @classmethod
    def parse(cls, text: str) -> "ImageSize":
        """Parse ``"WIDTHxHEIGHT"`` such as ``"640x480"``."""

        match = _SIZE_PATTERN.match(text or "")
        if match is None:
            raise ValueError(f"Image size must look like 640x480, got {text!r}")
        return cls(int(match.group(1)), int(match.group(2)))


def to_pixels(box: NormalizedBox, image_width: float, image_height: float) -> PixelRect:
    """Scale a normalized box to the given image dimensions."""

    return PixelRect(
        x=box.x * image_width,
        y=box.y * image_height,
        width=box.width * image_width,
        height=box.height * image_height,
    )


def from_pixels(rect: PixelRect, image_width: float, image_height: float) -> NormalizedBox:
    """Normalize a pixel rectangle; non-positive dimensions give the zero box."""

    if image_width <= 0 or image_height <= 0:
        return NormalizedBox.zero()
    return NormalizedBox(
        rect.x / image_width,
        rect.y / image_height,
        rect.width / image_width,
        rect.height / image_height,
    )
