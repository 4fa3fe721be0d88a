"""Execution and schedule status classification."""

from __future__ import annotations

from progress_engine.dates import DateLike, parse_date
from progress_engine.progress import actual_progress_at, planned_progress_at
from progress_engine.schema import AHEAD, COMPLETED, DELAYED, ON_TIME, PLANNED, STARTED, Task

STATUS_TOLERANCE = 0.05


def execution_status(task: Task) -> str:
    """Classify from the latest actual measurement only; the query date is irrelevant."""

    if not task.actual_progress:
        return PLANNED

    last_key = max(task.actual_progress)
    last_progress = task.actual_progress[last_key].progress_percentage
    if last_progress == 0:
        return PLANNED
    if last_progress < 1:
        return STARTED
    return COMPLETED


def overall_status(task: Task, now: DateLike) -> str:
    """Classify a task as ahead, on time or delayed at ``now``.

    A finished task is judged by its actual end date against the planned one.
    Otherwise actual progress is compared to planned progress within a fixed
    tolerance band.
    """

    if task.actual_end_date is not None:
        actual_end = parse_date(task.actual_end_date)
        planned_end = parse_date(task.end_date)
        if actual_end < planned_end:
            return AHEAD
        if actual_end > planned_end:
            return DELAYED
        return ON_TIME

    planned = planned_progress_at(task, now)
    actual = actual_progress_at(task, now)

    if actual < planned - STATUS_TOLERANCE:
        return DELAYED
    if actual > planned + STATUS_TOLERANCE:
        return AHEAD
    return ON_TIME
