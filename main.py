"""Command-line entry point for cleaning and reporting detection results."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
from typing import Any

import yaml

from config import ConfigController
from core.logging import enable_file_logging, log_error, log_info, logger, set_level
from vision.confidence import summarize
from vision.detections import detections_from_payloads
from vision.filters import clean_detections
from vision.pixels import ImageSize, to_pixels
from vision.settings import load_filter_settings


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Raw command-line arguments.

    Returns:
        Parsed arguments namespace.
    """

    parser = argparse.ArgumentParser(
        description="Filter normalized detections and print them in pixel space."
    )
    parser.add_argument(
        "detections",
        nargs="?",
        type=Path,
        help="JSON or YAML file holding a list of detection payloads.",
    )
    parser.add_argument(
        "--image-size",
        type=ImageSize.parse,
        default=None,
        help="Rendered image size as WIDTHxHEIGHT, e.g. 640x480.",
    )
    parser.add_argument(
        "--config-file",
        type=str,
        default="default.yaml",
        help="Config file name inside ./config.",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Run diagnostics probes and exit.",
    )
    return parser.parse_args(argv)


def load_payloads(path: Path) -> list[Any]:
    """Read detection payloads from a JSON or YAML file.

    A mapping with a ``detections`` key is accepted as well as a bare list.
    """

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)

    if isinstance(data, dict):
        data = data.get("detections", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of detections")
    return data


def main(argv: list[str] | None = None) -> int:
    """Application entry point.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Process exit code.
    """

    if argv is None:
        argv = sys.argv[1:]
    args = parse_args(argv)

    if args.diagnostics:
        from config.diagnostics import probe as config_probe
        from core.diagnostics import probe as core_probe
        from diagnostics.models import exit_code
        from diagnostics.runner import format_results, run_diagnostics
        from vision.diagnostics import probe as vision_probe

        results = run_diagnostics([config_probe, core_probe, vision_probe])
        print(format_results(results))
        return exit_code(results)

    if args.detections is None or args.image_size is None:
        log_error("A detections file and --image-size are required")
        return 2

    try:
        config = ConfigController.load_instance(args.config_file).get_config()
        set_level(config.get("logging_level", "INFO"))
        settings = load_filter_settings()
        payloads = load_payloads(args.detections)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        log_error(f"Could not load input: {exc}")
        return 2

    if args.log_file is not None:
        enable_file_logging(args.log_file)
        logger.info("Writing logs to %s", args.log_file)

    detections = detections_from_payloads(payloads)
    kept = clean_detections(detections, settings)
    log_info(f"Kept {len(kept)} of {len(detections)} detections")

    size = args.image_size
    for detection in kept:
        x, y, w, h = to_pixels(detection.box, size.width, size.height).as_int_tuple()
        print(f"{detection.class_name}\t{detection.confidence:.3f}\t{x}\t{y}\t{w}\t{h}")

    summary = summarize(detection.confidence for detection in kept)
    print(
        f"count={summary.count} average={summary.average:.3f} "
        f"min={summary.minimum:.3f} max={summary.maximum:.3f} "
        f"std={summary.standard_deviation:.3f}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
