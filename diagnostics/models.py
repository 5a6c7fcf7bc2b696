"""Models for diagnostics results."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class DiagnosticStatus(str, Enum):
    """Status for diagnostics checks."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"


@dataclass(frozen=True)
class DiagnosticResult:
    """Result for a single diagnostic check."""

    name: str
    status: DiagnosticStatus
    details: str


def exit_code(results: Iterable[DiagnosticResult]) -> int:
    """Return 1 when any result failed, else 0."""

    return 1 if any(result.status is DiagnosticStatus.FAIL for result in results) else 0
