"""Tests for config diagnostics."""

from __future__ import annotations

from diagnostics.models import DiagnosticStatus
from config.diagnostics import probe


def _write_default(tmp_path, text: str) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "default.yaml").write_text(text, encoding="utf-8")


def test_config_probe_offline(tmp_path) -> None:
    """Config probe should pass with a filter section present."""

    _write_default(tmp_path, "detection_filter:\n  min_confidence: 0.3\n")

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.PASS


def test_config_probe_warns_without_filter_section(tmp_path) -> None:
    _write_default(tmp_path, "logging_level: INFO\n")

    assert probe(base_dir=tmp_path).status is DiagnosticStatus.WARN


def test_config_probe_fails_without_config_dir(tmp_path) -> None:
    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.FAIL
    assert "Config directory missing" in result.details


def test_config_probe_fails_without_default_file(tmp_path) -> None:
    (tmp_path / "config").mkdir()

    assert probe(base_dir=tmp_path).status is DiagnosticStatus.FAIL


def test_config_probe_fails_on_invalid_yaml(tmp_path) -> None:
    _write_default(tmp_path, "detection_filter: [unclosed\n")

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.FAIL
    assert "Invalid YAML" in result.details


def test_config_probe_fails_on_non_mapping(tmp_path) -> None:
    _write_default(tmp_path, "- grain\n- pore\n")

    assert probe(base_dir=tmp_path).status is DiagnosticStatus.FAIL
