"""JSON adapter for timeline snapshots."""

from __future__ import annotations

import json
from typing import Any, Optional

from loguru import logger

from progress_engine.dates import date_key, parse_date
from progress_engine.errors import MalformedDateError, ValidationFailedError
from progress_engine.schema import ProgressMeasurement, Task, Timeline

_REQUIRED_TASK_FIELDS = {"id", "name", "start_date", "end_date", "weight", "duration"}
_REQUIRED_TIMELINE_FIELDS = {"id", "name", "created_at"}


def _parse_date(value: Any, where: str):
    try:
        return parse_date(value)
    except MalformedDateError as exc:
        raise MalformedDateError(value, f"{where}: malformed date {value!r}") from exc


def _parse_key(value: Any, where: str) -> str:
    return date_key(_parse_date(value, where))


def _parse_planned(raw: Optional[dict], where: str) -> dict[str, float]:
    planned = {}
    for key, value in (raw or {}).items():
        canonical = _parse_key(key, where)
        try:
            planned[canonical] = float(value)
        except (TypeError, ValueError) as exc:
            raise ValidationFailedError("planned_progress", f"{where}: invalid planned progress at {key}") from exc
    return planned


def _parse_measurements(raw: Optional[dict], where: str) -> Optional[dict[str, ProgressMeasurement]]:
    if raw is None:
        return None

    measurements = {}
    for key, item in raw.items():
        try:
            progress = float(item["progress_percentage"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationFailedError("progress_percentage", f"{where}: invalid measurement at {key}") from exc
        if not 0 <= progress <= 1:
            raise ValidationFailedError("progress_percentage", f"{where}: progress {progress} outside [0, 1] at {key}")
        measured = item.get("measurement_date", key)
        measurements[_parse_key(key, where)] = ProgressMeasurement(
            progress_percentage=progress,
            measurement_date=_parse_date(measured, where),
            publication_date=_parse_date(item.get("publication_date", measured), where),
        )
    return measurements


def _parse_number(item: dict, field: str, kind, where: str, task_id: str):
    try:
        return kind(item[field])
    except (TypeError, ValueError) as exc:
        raise ValidationFailedError(field, f"{where}: invalid {field} {item[field]!r}", task_id=task_id) from exc


def _parse_task(item: dict, where: str) -> Task:
    missing = sorted(field for field in _REQUIRED_TASK_FIELDS if item.get(field) is None)
    if missing:
        raise ValidationFailedError(missing[0], f"{where}: missing required fields {missing}", task_id=item.get("id"))

    task_id = str(item["id"])
    where = f"{where} task {task_id}"
    subtasks = item.get("subtasks")
    actual_start = item.get("actual_start_date")
    actual_end = item.get("actual_end_date")
    return Task(
        id=task_id,
        name=str(item["name"]),
        start_date=_parse_date(item["start_date"], where),
        end_date=_parse_date(item["end_date"], where),
        weight=_parse_number(item, "weight", float, where, task_id),
        duration=_parse_number(item, "duration", int, where, task_id),
        planned_progress=_parse_planned(item.get("planned_progress"), where),
        actual_progress=_parse_measurements(item.get("actual_progress"), where),
        cost=float(item["cost"]) if item.get("cost") is not None else None,
        hierarchy=item.get("hierarchy"),
        actual_start_date=_parse_date(actual_start, where) if actual_start is not None else None,
        actual_end_date=_parse_date(actual_end, where) if actual_end is not None else None,
        subtasks=[_parse_task(child, where) for child in subtasks] if subtasks is not None else None,
    )


def timeline_from_dict(item: dict, index: int = 1) -> Timeline:
    """Build a timeline snapshot from a decoded JSON object.

    Progress map keys are re-keyed to canonical UTC date keys.
    """

    where = f"Item {index}"
    missing = sorted(field for field in _REQUIRED_TIMELINE_FIELDS if item.get(field) is None)
    if missing:
        raise ValidationFailedError(missing[0], f"{where}: missing required fields {missing}")

    return Timeline(
        id=str(item["id"]),
        name=str(item["name"]),
        created_at=_parse_date(item["created_at"], where),
        planned_progress=_parse_planned(item.get("planned_progress"), where),
        actual_progress=_parse_measurements(item.get("actual_progress"), where),
        tasks=[_parse_task(task, where) for task in item.get("tasks") or []],
        currency=item.get("currency"),
        project_id=item.get("project_id"),
        works_saturdays=bool(item.get("worksSaturdays", item.get("works_saturdays", False))),
        works_sundays=bool(item.get("worksSundays", item.get("works_sundays", False))),
    )


def _task_to_dict(task: Task) -> dict:
    payload = {
        "id": task.id,
        "name": task.name,
        "start_date": date_key(task.start_date),
        "end_date": date_key(task.end_date),
        "weight": task.weight,
        "duration": task.duration,
        "planned_progress": dict(task.planned_progress),
    }
    if task.actual_progress is not None:
        payload["actual_progress"] = {key: m.as_dict() for key, m in task.actual_progress.items()}
    if task.cost is not None:
        payload["cost"] = task.cost
    if task.hierarchy is not None:
        payload["hierarchy"] = task.hierarchy
    if task.actual_start_date is not None:
        payload["actual_start_date"] = date_key(task.actual_start_date)
    if task.actual_end_date is not None:
        payload["actual_end_date"] = date_key(task.actual_end_date)
    if task.subtasks is not None:
        payload["subtasks"] = [_task_to_dict(subtask) for subtask in task.subtasks]
    return payload


def timeline_to_dict(timeline: Timeline) -> dict:
    """Serialize a snapshot into the shape ``timeline_from_dict`` reads."""

    payload = {
        "id": timeline.id,
        "name": timeline.name,
        "created_at": date_key(timeline.created_at),
        "planned_progress": dict(timeline.planned_progress),
        "tasks": [_task_to_dict(task) for task in timeline.tasks],
        "worksSaturdays": timeline.works_saturdays,
        "worksSundays": timeline.works_sundays,
    }
    if timeline.actual_progress is not None:
        payload["actual_progress"] = {key: m.as_dict() for key, m in timeline.actual_progress.items()}
    if timeline.currency is not None:
        payload["currency"] = timeline.currency
    if timeline.project_id is not None:
        payload["project_id"] = timeline.project_id
    return payload


def parse(file_path: str) -> list[Timeline]:
    """Parse a JSON file holding one timeline object or a list of them."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise ValueError("JSON payload must be an object or a list of objects")

    timelines = [timeline_from_dict(item, i) for i, item in enumerate(payload, start=1)]
    logger.debug("Parsed {} timelines from {}", len(timelines), file_path)
    return timelines
