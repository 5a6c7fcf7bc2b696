"""Diagnostics routines for the vision geometry subsystem."""

from __future__ import annotations

from diagnostics.models import DiagnosticResult, DiagnosticStatus
from vision.boxes import NormalizedBox
from vision.confidence import summarize
from vision.detections import DetectionResult
from vision.filters import remove_duplicates
from vision.pixels import to_pixels


def _reference_checks() -> list[tuple[str, bool]]:
    """Known-answer checks for the geometry and filtering code."""

    clamped = NormalizedBox(0.5, 0.5, 0.8, 0.8)
    first = NormalizedBox(0.0, 0.0, 0.5, 0.5)
    second = NormalizedBox(0.25, 0.25, 0.5, 0.5)
    rotated = first.rotated(90).rotated(90).rotated(90).rotated(90)
    pixels = to_pixels(second, 200, 100)
    kept = remove_duplicates(
        [
            DetectionResult("grain", 0.6, NormalizedBox(0.1, 0.1, 0.4, 0.4)),
            DetectionResult("grain", 0.9, NormalizedBox(0.12, 0.12, 0.4, 0.4)),
        ],
        threshold=0.5,
    )
    empty = summarize([])

    return [
        ("clamp", clamped == NormalizedBox(0.5, 0.5, 0.5, 0.5)),
        ("iou", abs(first.intersection_over_union(second) - 0.0625 / 0.4375) < 1e-6),
        ("rotation", rotated == first),
        ("pixels", pixels.as_int_tuple() == (50, 25, 100, 50)),
        ("duplicates", len(kept) == 1 and kept[0].confidence == 0.6),
        ("summary", empty.average == 0.0 and empty.standard_deviation == 0.0),
    ]


def probe() -> DiagnosticResult:
    """Run the geometry self-check.

    Returns:
        Diagnostic result listing any failing reference checks.
    """

    name = "vision"
    failed = [check for check, passed in _reference_checks() if not passed]
    if failed:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Reference checks failed: {', '.join(failed)}",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details="Box geometry and filters match reference results",
    )
