"""Tests for core diagnostics."""

from __future__ import annotations

import importlib.util

from diagnostics.models import DiagnosticStatus
from core.diagnostics import probe


def test_core_probe() -> None:
    """Core probe should pass when rich logging is available."""

    result = probe()
    if importlib.util.find_spec("rich") is None:
        assert result.status is DiagnosticStatus.WARN
    else:
        assert result.status is DiagnosticStatus.PASS


def test_core_probe_fails_without_handlers(monkeypatch) -> None:
    from core import logging as core_logging

    monkeypatch.setattr(core_logging.logger, "handlers", [])
    assert probe().status is DiagnosticStatus.FAIL
