"""Project dashboard aggregation across timeline revisions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import numpy as np
from loguru import logger

from progress_engine.dates import DateLike, date_key, day_key, parse_date
from progress_engine.errors import NotFoundError, ValidationFailedError
from progress_engine.rollup import sum_date_status, sum_execution
from progress_engine.schema import ProgressMeasurement, Timeline


@dataclass
class Dashboard:
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    today: str
    total_days: int
    elapsed_days: int
    remaining_days: int
    progress_curves: dict[str, dict[str, Optional[float]]]
    task_execution: dict[str, int]
    task_date_status: dict[str, int]

    def as_dict(self) -> dict[str, Any]:
        return {
            "start_date": date_key(self.start_date) if self.start_date else None,
            "end_date": date_key(self.end_date) if self.end_date else None,
            "today": self.today,
            "total_days": self.total_days,
            "elapsed_days": self.elapsed_days,
            "remaining_days": self.remaining_days,
            "progress_curves": self.progress_curves,
            "task_execution": self.task_execution,
            "task_date_status": self.task_date_status,
        }


def project_revisions(timelines: list[Timeline], project_id: Optional[str] = None) -> list[Timeline]:
    """Return the revisions of one project from a mixed list of snapshots.

    Without ``project_id`` the snapshots must all belong to the same project.
    """

    grouped: dict[Optional[str], list[Timeline]] = {}
    for timeline in timelines:
        grouped.setdefault(timeline.project_id, []).append(timeline)

    if project_id is not None:
        if project_id not in grouped:
            raise NotFoundError(f"no timelines for project {project_id!r}")
        return grouped[project_id]
    if len(grouped) > 1:
        projects = sorted(str(key) for key in grouped)
        raise ValidationFailedError("project_id", f"snapshots span several projects {projects}; pick one")
    return list(timelines)


def select_revisions(timelines: list[Timeline]) -> tuple[Timeline, Optional[Timeline]]:
    """Return the latest revision and the earliest other one (the original baseline)."""

    if not timelines:
        raise NotFoundError("no timelines for project")

    latest = max(timelines, key=lambda timeline: parse_date(timeline.created_at))
    others = [timeline for timeline in timelines if timeline.id != latest.id]
    original = min(others, key=lambda timeline: parse_date(timeline.created_at)) if others else None
    return latest, original


def _fill_gaps(curves: dict[str, dict[str, Optional[float]]]) -> None:
    present = np.array(sorted({parse_date(key).date() for key in curves}), dtype="datetime64[D]")
    all_days = np.arange(present[0], present[-1] + np.timedelta64(1, "D"), dtype="datetime64[D]")
    for day in np.setdiff1d(all_days, present):
        curves[day_key(str(day))] = {"planned": None, "actual": None}


def merge_progress_curves(
    planned: dict[str, float],
    actual: Optional[dict[str, ProgressMeasurement]],
    original: Optional[dict[str, float]] = None,
) -> dict[str, dict[str, Optional[float]]]:
    """Merge the three curves by date key and fill every missing calendar day in between."""

    curves: dict[str, dict[str, Optional[float]]] = {}
    for key, value in planned.items():
        curves.setdefault(key, {})["planned"] = value
    for key, measurement in (actual or {}).items():
        curves.setdefault(key, {})["actual"] = measurement.progress_percentage
    for key, value in (original or {}).items():
        curves.setdefault(key, {})["original"] = value

    if curves:
        _fill_gaps(curves)
    return dict(sorted(curves.items()))


def build_dashboard(timelines: list[Timeline], today: DateLike) -> Dashboard:
    """Aggregate the latest revision of a project against its original baseline."""

    latest, original = select_revisions(timelines)
    today_key = date_key(today)
    logger.debug(
        "Dashboard for timeline {} (original: {}) at {}",
        latest.id,
        original.id if original is not None else None,
        today_key,
    )

    tasks = latest.tasks
    start_date = min((parse_date(task.start_date) for task in tasks), default=None)
    end_date = max((parse_date(task.end_date) for task in tasks), default=None)

    planned_keys = np.array(sorted(latest.planned_progress), dtype=str)
    total_days = int(planned_keys.size)
    elapsed_days = int(np.searchsorted(planned_keys, today_key, side="left")) if total_days else 0

    return Dashboard(
        start_date=start_date,
        end_date=end_date,
        today=today_key,
        total_days=total_days,
        elapsed_days=elapsed_days,
        remaining_days=total_days - elapsed_days,
        progress_curves=merge_progress_curves(
            latest.planned_progress,
            latest.actual_progress,
            original.planned_progress if original is not None else None,
        ),
        task_execution=sum_execution(tasks),
        task_date_status=sum_date_status(tasks, today),
    )
