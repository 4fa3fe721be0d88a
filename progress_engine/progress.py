"""Point-in-time progress resolution for a single task."""

from __future__ import annotations

from progress_engine.dates import DateLike, nearest_prior_date, parse_date
from progress_engine.schema import Task


def planned_progress_at(task: Task, target: DateLike) -> float:
    """Planned fraction at ``target``: 0 before the window, 1 after it, else the nearest prior curve value."""

    target_dt = parse_date(target)
    if target_dt < parse_date(task.start_date):
        return 0.0
    if target_dt > parse_date(task.end_date):
        return 1.0

    key = nearest_prior_date(task.planned_progress, target_dt)
    if key is None:
        return 0.0
    return task.planned_progress[key]


def actual_progress_at(task: Task, target: DateLike) -> float:
    """Actual fraction at ``target`` from the nearest prior measurement, or 0."""

    if not task.actual_progress:
        return 0.0

    key = nearest_prior_date(task.actual_progress, target)
    if key is None:
        return 0.0
    return task.actual_progress[key].progress_percentage


def was_edited_on(task: Task, target: DateLike) -> bool:
    """True when the nearest prior measurement was taken on ``target``'s calendar day."""

    if not task.actual_progress:
        return False

    target_dt = parse_date(target)
    key = nearest_prior_date(task.actual_progress, target_dt)
    if key is None:
        return False

    measured = parse_date(task.actual_progress[key].measurement_date)
    return measured.date() == target_dt.date()
