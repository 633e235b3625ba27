# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Sprint metrics command line interface.

Runs the metrics pipeline over a snapshot file and prints the report as JSON.

Usage:
    # Full report over the last 30 days
    sprint-metrics snapshot.json

    # One section, computed for a fixed instant
    sprint-metrics snapshot.yaml --range 7d --as-of 2025-03-14T12:00:00Z --section burndown

    # Read the snapshot from stdin
    cat snapshot.json | sprint-metrics -
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from sprint_metrics.analytics.adapters.timestamps import normalize_timestamp
from sprint_metrics.analytics.calculators.velocity import SUPPORTED_TIME_RANGES
from sprint_metrics.analytics.models import SprintMetricsReport
from sprint_metrics.analytics.service import AnalyticsService
from sprint_metrics.utils.config import get_settings, load_settings
from sprint_metrics.utils.errors import SnapshotError, ValidationError, error_handler, log_error
from sprint_metrics.utils.logger import setup_logging

logger = logging.getLogger(__name__)

REPORT_SECTIONS = tuple(name for name in SprintMetricsReport.model_fields if name != "as_of")
EXTRA_SECTIONS = ("charts", "capacity", "assignee_distribution", "priority_distribution")


def read_snapshot(path: str) -> Dict[str, Any]:
    """
    Read a JSON or YAML snapshot document.

    ``-`` reads from stdin. Files ending in ``.yaml``/``.yml`` are parsed as
    YAML, everything else as JSON.

    Raises:
        SnapshotError: if the file is missing or cannot be decoded
    """
    if path == "-":
        text = sys.stdin.read()
        is_yaml = False
    else:
        file_path = Path(path)
        if not file_path.exists():
            raise SnapshotError(f"Snapshot file not found: {path}", details={"path": path})
        text = file_path.read_text(encoding="utf-8")
        is_yaml = file_path.suffix.lower() in (".yaml", ".yml")

    try:
        data = yaml.safe_load(text) if is_yaml else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SnapshotError(f"Could not decode snapshot {path}: {e}", details={"path": path}) from e

    if not isinstance(data, dict):
        raise SnapshotError(
            f"Snapshot {path} must contain a mapping",
            details={"path": path, "type": type(data).__name__},
        )
    return data


def _time_range(value: str):
    return int(value) if value.isdigit() else value


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="sprint-metrics",
        description="Compute sprint burndown, velocity, cycle time and contributor metrics",
    )
    parser.add_argument("snapshot", help="Snapshot file (JSON or YAML), or - for stdin")
    parser.add_argument(
        "--range",
        dest="time_range",
        type=_time_range,
        default=None,
        help=f"Trailing window: {', '.join(SUPPORTED_TIME_RANGES)} or a number of days "
             "(default: configured range)",
    )
    parser.add_argument("--as-of", default=None, help="Reference instant, ISO-8601 (default: now)")
    parser.add_argument("--config", default=None, help="YAML settings overlay")
    parser.add_argument(
        "--section",
        choices=REPORT_SECTIONS + EXTRA_SECTIONS,
        default=None,
        help="Print one section instead of the full report",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> Any:
    """Run the pipeline and return the JSON-ready output"""
    settings = load_settings(args.config) if args.config else get_settings()
    setup_logging(settings.log_level, settings.debug, settings.log_file)

    as_of = None
    if args.as_of:
        as_of = normalize_timestamp(args.as_of)
        if as_of is None:
            raise ValidationError(f"Invalid --as-of value: {args.as_of}", details={"as_of": args.as_of})

    service = AnalyticsService(settings)
    snapshot = service.load(read_snapshot(args.snapshot))
    report = service.compute(snapshot, args.time_range, as_of)

    if args.section is None:
        return report.model_dump(mode="json")
    if args.section == "charts":
        return {name: chart.model_dump(mode="json") for name, chart in service.get_charts(report).items()}
    if args.section == "capacity":
        plan = service.capacity(snapshot)
        return plan.model_dump(mode="json") if plan is not None else None
    if args.section in ("assignee_distribution", "priority_distribution"):
        dimension = args.section.split("_", 1)[0]
        return service.work_distribution(snapshot, dimension).model_dump(mode="json")
    return report.model_dump(mode="json")[args.section]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    try:
        output = run(args)
    except Exception as e:
        log_error(e, {"snapshot": args.snapshot})
        print(json.dumps(error_handler(e), indent=args.indent, default=str), file=sys.stderr)
        return 1

    print(json.dumps(output, indent=args.indent, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
