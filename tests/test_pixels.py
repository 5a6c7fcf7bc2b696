"""Tests for pixel-space conversion."""

from __future__ import annotations

import pytest

from vision.boxes import NormalizedBox
from vision.pixels import ImageSize, PixelRect, from_pixels, to_pixels


def test_to_pixels_scales_each_axis() -> None:
    rect = to_pixels(NormalizedBox(0.25, 0.25, 0.5, 0.5), 200, 100)
    assert (rect.x, rect.y, rect.width, rect.height) == pytest.approx((50, 25, 100, 50))
    assert rect.right == pytest.approx(150)
    assert rect.bottom == pytest.approx(75)


def test_pixel_rect_keeps_fractional_pixels() -> None:
    rect = to_pixels(NormalizedBox(0.1, 0.1, 0.1, 0.1), 33, 33)
    assert rect.x == pytest.approx(3.3)
    assert rect.as_int_tuple() == (3, 3, 3, 3)


def test_as_int_tuple_rounds_to_nearest_pixel() -> None:
    assert PixelRect(10.4, 10.6, 20.6, 3.0).as_int_tuple() == (10, 11, 21, 3)


def test_from_pixels_normalizes() -> None:
    box = from_pixels(PixelRect(50, 25, 100, 50), 200, 100)
    assert box == NormalizedBox(0.25, 0.25, 0.5, 0.5)


def test_from_pixels_clamps_rect_outside_image() -> None:
    box = from_pixels(PixelRect(150, 0, 100, 50), 200, 100)
    assert box.x == pytest.approx(0.75)
    assert box.width == pytest.approx(0.25)


@pytest.mark.parametrize("size", [(0, 100), (200, 0), (-10, 100), (0, 0)])
def test_from_pixels_with_empty_image_gives_zero_box(size) -> None:
    box = from_pixels(PixelRect(50, 25, 100, 50), *size)
    assert box.as_tuple() == (0.0, 0.0, 0.0, 0.0)


def test_round_trip_through_pixels() -> None:
    box = NormalizedBox(0.123, 0.456, 0.321, 0.234)
    assert from_pixels(to_pixels(box, 640, 480), 640, 480) == box


def test_image_size_parse() -> None:
    assert ImageSize.parse("640x480") == ImageSize(640, 480)
    assert ImageSize.parse(" 1920X1080 ") == ImageSize(1920, 1080)


@pytest.mark.parametrize("text", ["640*480", "", "x480", "640x", "-640x480"])
def test_image_size_parse_rejects_malformed_text(text) -> None:
    with pytest.raises(ValueError):
        ImageSize.parse(text)
