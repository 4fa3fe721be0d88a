"""Compute the project dashboard and latest timeline view from a JSON snapshot file."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from loguru import logger

from progress_engine.adapters import csv_adapter, json_adapter
from progress_engine.config import settings
from progress_engine.dashboard import build_dashboard, project_revisions, select_revisions
from progress_engine.logging_setup import setup_logging
from progress_engine.mutations import apply_measurements
from progress_engine.projection import project_timeline


def main() -> None:
    parser = argparse.ArgumentParser(description="Run progress-engine dashboard aggregation")
    parser.add_argument("--data", required=True, help="Path to JSON timeline snapshots")
    parser.add_argument("--measurements", help="Optional CSV of measurements to record on the latest timeline")
    parser.add_argument("--today", help="Query date (ISO-8601); defaults to the current UTC time")
    parser.add_argument("--permission", default=settings.default_permission, help="Caller permission tier")
    parser.add_argument("--project", help="Project id to report on when the file holds several projects")
    args = parser.parse_args()

    setup_logging()

    now = datetime.now(timezone.utc)
    today = args.today or now
    timelines = project_revisions(json_adapter.parse(args.data), args.project)

    if args.measurements:
        latest, _ = select_revisions(timelines)
        rows = csv_adapter.parse(args.measurements)
        updated = apply_measurements(latest, rows, now=now)
        timelines = [updated if timeline.id == latest.id else timeline for timeline in timelines]
        logger.info("Recorded {} measurements on timeline {}", len(rows), latest.id)

    dashboard = build_dashboard(timelines, today)
    latest, _ = select_revisions(timelines)
    report = {
        "dashboard": dashboard.as_dict(),
        "timeline": project_timeline(latest, today, permission=args.permission).as_dict(),
    }

    print(json.dumps(report, indent=2))

    outputs_dir = Path(settings.output_dir)
    outputs_dir.mkdir(parents=True, exist_ok=True)
    out_path = outputs_dir / "dashboard_report.json"
    out_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    logger.info("Saved dashboard report to {}", out_path)


if __name__ == "__main__":
    main()
