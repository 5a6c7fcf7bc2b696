"""Diagnostics routines for the configuration subsystem."""

from __future__ import annotations

from pathlib import Path

import yaml

from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe(base_dir: Path | None = None) -> DiagnosticResult:
    """Check that the config files exist and parse as YAML mappings.

    Args:
        base_dir: Optional base directory for offline testing.

    Returns:
        Diagnostic result indicating config readiness.
    """

    name = "config"
    root_dir = base_dir if base_dir is not None else Path.cwd()
    config_dir = root_dir / "config"
    default_config = config_dir / "default.yaml"
    override_config = config_dir / "override.yaml"

    if not config_dir.exists():
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Config directory missing at {config_dir}",
        )

    if not default_config.exists():
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Missing default config at {default_config}",
        )

    files = [default_config]
    if override_config.exists():
        files.append(override_config)

    for path in files:
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            return DiagnosticResult(
                name=name,
                status=DiagnosticStatus.FAIL,
                details=f"Config access failed: {exc}",
            )
        except yaml.YAMLError as exc:
            return DiagnosticResult(
                name=name,
                status=DiagnosticStatus.FAIL,
                details=f"Invalid YAML in {path.name}: {exc}",
            )
        if loaded is not None and not isinstance(loaded, dict):
            return DiagnosticResult(
                name=name,
                status=DiagnosticStatus.FAIL,
                details=f"{path.name} must contain a mapping",
            )
        if loaded and "detection_filter" not in loaded and path == default_config:
            return DiagnosticResult(
                name=name,
                status=DiagnosticStatus.WARN,
                details="No detection_filter section; built-in defaults apply",
            )

    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"Config files readable at {config_dir}",
    )
