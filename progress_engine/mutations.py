"""Pure reducers producing updated timeline snapshots.

None of these functions modify their inputs; the caller persists the returned
snapshot as one write.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from loguru import logger

from progress_engine.dates import DateLike, date_key, parse_date
from progress_engine.errors import NotFoundError, ValidationFailedError
from progress_engine.rollup import iter_tasks
from progress_engine.schema import ProgressMeasurement, Task, Timeline

_IMMUTABLE_FIELDS = {"id", "subtasks"}
_TASK_FIELDS = {f.name for f in fields(Task)}
_WINDOW_FIELDS = {"start_date", "end_date"}
_DATE_FIELDS = {"actual_start_date", "actual_end_date"}


@dataclass
class TaskUpdate:
    task_id: str
    data: dict[str, Any]


@dataclass
class MeasurementRow:
    """One actual-progress measurement for a task, as read from an import file."""

    task_id: str
    measurement_date: DateLike
    progress_percentage: float
    publication_date: Optional[DateLike] = None


def _strip_key(progress: Optional[dict], key: str) -> Optional[dict]:
    if progress is None or key not in progress:
        return progress
    return {k: v for k, v in progress.items() if k != key}


def _strip_task(task: Task, key: str) -> Task:
    subtasks = task.subtasks
    if subtasks is not None:
        subtasks = [_strip_task(subtask, key) for subtask in subtasks]
    return replace(task, actual_progress=_strip_key(task.actual_progress, key), subtasks=subtasks)


def delete_progress_on(timeline: Timeline, date: DateLike) -> Timeline:
    """Remove the actual-progress entry for ``date`` from the timeline and every task in it."""

    key = date_key(date)
    logger.debug("Deleting actual progress at {} from timeline {}", key, timeline.id)
    return replace(
        timeline,
        actual_progress=_strip_key(timeline.actual_progress, key),
        tasks=[_strip_task(task, key) for task in timeline.tasks],
    )


def record_measurement(
    task: Task,
    *,
    now: DateLike,
    progress: Optional[float] = None,
    start_date: Optional[DateLike] = None,
    end_date: Optional[DateLike] = None,
    date: Optional[DateLike] = None,
) -> Task:
    """Return ``task`` with a new measurement and/or actual start and end dates."""

    changes: dict[str, Any] = {}
    if progress is not None:
        if not 0 <= progress <= 1:
            raise ValidationFailedError("progress", f"progress {progress} outside [0, 1]", task_id=task.id)
        published = parse_date(now)
        measured = parse_date(date) if date is not None else published
        actual = dict(task.actual_progress or {})
        actual[date_key(measured)] = ProgressMeasurement(
            progress_percentage=progress,
            measurement_date=measured,
            publication_date=published,
        )
        changes["actual_progress"] = actual
    if start_date is not None:
        changes["actual_start_date"] = parse_date(start_date)
    if end_date is not None:
        changes["actual_end_date"] = parse_date(end_date)
    return replace(task, **changes)


def _replace_tasks(tasks: list[Task], replacements: dict[str, Any]) -> list[Task]:
    result = []
    for task in tasks:
        if task.subtasks is not None:
            task = replace(task, subtasks=_replace_tasks(task.subtasks, replacements))
        change = replacements.get(task.id)
        if change is not None:
            task = change(task)
        result.append(task)
    return result


def _find_tasks(tasks: list[Task]) -> dict[str, Task]:
    return {task.id: task for task in iter_tasks(tasks)}


def _number(name: str, value: Any, task_id: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationFailedError(name, f"{name} must be a number, got {value!r}", task_id=task_id)
    return value


def _fraction(name: str, value: Any, task_id: str) -> float:
    value = _number(name, value, task_id)
    if not 0 <= value <= 1:
        raise ValidationFailedError(name, f"{name} {value} outside [0, 1]", task_id=task_id)
    return value


def _measurement(key: str, value: Any, task_id: str) -> ProgressMeasurement:
    if isinstance(value, ProgressMeasurement):
        progress, measured, published = value.progress_percentage, value.measurement_date, value.publication_date
    elif isinstance(value, dict) and "progress_percentage" in value:
        progress = value["progress_percentage"]
        measured = value.get("measurement_date", key)
        published = value.get("publication_date", measured)
    else:
        raise ValidationFailedError("actual_progress", f"invalid measurement at {key}: {value!r}", task_id=task_id)
    return ProgressMeasurement(
        progress_percentage=_fraction("actual_progress", progress, task_id),
        measurement_date=parse_date(measured),
        publication_date=parse_date(published),
    )


def _validated_value(task_id: str, name: str, value: Any) -> Any:
    if name == "weight":
        return _fraction(name, value, task_id)
    if name == "duration":
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationFailedError(name, f"duration must be a non-negative integer, got {value!r}", task_id=task_id)
        return value
    if name == "cost":
        return None if value is None else _number(name, value, task_id)
    if name in _WINDOW_FIELDS:
        if value is None:
            raise ValidationFailedError(name, f"{name} cannot be cleared", task_id=task_id)
        return parse_date(value)
    if name in _DATE_FIELDS:
        return None if value is None else parse_date(value)
    if name == "planned_progress":
        if not isinstance(value, dict):
            raise ValidationFailedError(name, "planned_progress must be a mapping", task_id=task_id)
        return {date_key(key): _fraction(name, point, task_id) for key, point in value.items()}
    if name == "actual_progress":
        if value is None:
            return None
        if not isinstance(value, dict):
            raise ValidationFailedError(name, "actual_progress must be a mapping", task_id=task_id)
        return {date_key(key): _measurement(key, point, task_id) for key, point in value.items()}
    return value


def _validated_data(task_id: str, data: dict[str, Any]) -> dict[str, Any]:
    cleaned = {}
    for name, value in data.items():
        if name in _IMMUTABLE_FIELDS or name not in _TASK_FIELDS:
            raise ValidationFailedError(name, f"field {name!r} cannot be updated", task_id=task_id)
        cleaned[name] = _validated_value(task_id, name, value)
    return cleaned


def _check_window(task: Task, data: dict[str, Any]) -> None:
    start = data.get("start_date", task.start_date)
    end = data.get("end_date", task.end_date)
    if parse_date(end) <= parse_date(start):
        raise ValidationFailedError("end_date", "end_date must be after start_date", task_id=task.id)


def bulk_update_tasks(timeline: Timeline, updates: list[TaskUpdate]) -> tuple[Timeline, list[Task]]:
    """Apply one merged update per task id and return the new timeline and updated tasks."""

    known = _find_tasks(timeline.tasks)
    merged: dict[str, dict[str, Any]] = {}
    for update in updates:
        if update.task_id not in known:
            raise NotFoundError(f"task {update.task_id!r} not found in timeline {timeline.id!r}")
        merged.setdefault(update.task_id, {}).update(_validated_data(update.task_id, update.data))
    for task_id, data in merged.items():
        _check_window(known[task_id], data)

    replacements = {task_id: (lambda task, data=data: replace(task, **data)) for task_id, data in merged.items()}
    updated = replace(timeline, tasks=_replace_tasks(timeline.tasks, replacements))
    logger.debug("Applied {} updates to {} tasks in timeline {}", len(updates), len(merged), timeline.id)

    by_id = _find_tasks(updated.tasks)
    return updated, [by_id[update.task_id] for update in updates]


def apply_measurements(timeline: Timeline, rows: list[MeasurementRow], now: DateLike) -> Timeline:
    """Record every row's measurement on its task, in row order."""

    known = _find_tasks(timeline.tasks)
    by_task: dict[str, list[MeasurementRow]] = {}
    for row in rows:
        if row.task_id not in known:
            raise NotFoundError(f"task {row.task_id!r} not found in timeline {timeline.id!r}")
        by_task.setdefault(row.task_id, []).append(row)

    def _apply(task_rows):
        def change(task: Task) -> Task:
            for row in task_rows:
                published = row.publication_date if row.publication_date is not None else now
                task = record_measurement(
                    task, now=published, progress=row.progress_percentage, date=row.measurement_date
                )
            return task

        return change

    replacements = {task_id: _apply(task_rows) for task_id, task_rows in by_task.items()}
    logger.debug("Recording {} measurements in timeline {}", len(rows), timeline.id)
    return replace(timeline, tasks=_replace_tasks(timeline.tasks, replacements))
