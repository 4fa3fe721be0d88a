"""Measurement history across a project's timeline revisions."""

from __future__ import annotations

from progress_engine.dates import parse_date
from progress_engine.errors import NotFoundError
from progress_engine.schema import ProgressMeasurement, Timeline


def measurement_history(timelines: list[Timeline]) -> list[ProgressMeasurement]:
    """Return every timeline-level measurement, newest measurement date first."""

    if not timelines:
        raise NotFoundError("no timelines for project")

    newest_first = sorted(timelines, key=lambda timeline: parse_date(timeline.created_at), reverse=True)
    measurements = [
        measurement
        for timeline in newest_first
        for measurement in (timeline.actual_progress or {}).values()
    ]
    return sorted(measurements, key=lambda m: parse_date(m.measurement_date), reverse=True)
