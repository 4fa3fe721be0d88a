"""Construction of new timelines from creation payloads."""

from __future__ import annotations

import math
import uuid
from typing import Any, Optional

from loguru import logger

from progress_engine.config import settings
from progress_engine.dates import DateLike, parse_date
from progress_engine.errors import ValidationFailedError
from progress_engine.schema import Task, Timeline

_SECONDS_PER_DAY = 24 * 60 * 60


def _pick(item: dict, *names: str) -> Any:
    for name in names:
        if item.get(name) is not None:
            return item[name]
    return None


def _build_task(item: dict, default_weight: float) -> Task:
    task_id = _pick(item, "id")
    name = _pick(item, "name")
    if not task_id or not name:
        raise ValidationFailedError("id" if not task_id else "name", "task requires id and name", task_id=task_id)

    start_raw = _pick(item, "startDate", "start_date")
    end_raw = _pick(item, "endDate", "end_date")
    if start_raw is None or end_raw is None:
        raise ValidationFailedError("start_date" if start_raw is None else "end_date", "missing date", task_id=task_id)
    start = parse_date(start_raw)
    end = parse_date(end_raw)
    if end <= start:
        raise ValidationFailedError("end_date", "end date must be after start date", task_id=task_id)

    weight = _pick(item, "weight")
    weight = default_weight if weight is None else float(weight)
    if not 0 <= weight <= 1:
        raise ValidationFailedError("weight", f"weight {weight} outside [0, 1]", task_id=task_id)

    subtasks = None
    children = _pick(item, "subtasks")
    if children:
        subtasks = [_build_task(child, 1 / len(children)) for child in children]

    cost = _pick(item, "cost")
    return Task(
        id=str(task_id),
        name=str(name),
        start_date=start,
        end_date=end,
        weight=weight,
        duration=math.ceil((end - start).total_seconds() / _SECONDS_PER_DAY),
        planned_progress={},
        actual_progress={},
        cost=float(cost) if cost is not None else None,
        hierarchy=_pick(item, "hierarchy"),
        subtasks=subtasks,
    )


def build_timeline(payload: dict, *, now: DateLike, timeline_id: Optional[str] = None) -> Timeline:
    """Create a timeline with equal sibling weights and empty progress maps."""

    name = payload.get("name")
    if not name:
        raise ValidationFailedError("name", "timeline requires a name")

    items = payload.get("tasks") or []
    if not items:
        raise ValidationFailedError("tasks", "timeline requires at least one task")

    tasks = [_build_task(item, 1 / len(items)) for item in items]
    timeline = Timeline(
        id=timeline_id or uuid.uuid4().hex,
        name=str(name),
        created_at=parse_date(now),
        planned_progress={},
        actual_progress={},
        tasks=tasks,
        currency=payload.get("currency") or settings.default_currency,
        project_id=payload.get("project_id"),
        works_saturdays=bool(_pick(payload, "worksSaturdays", "works_saturdays")),
        works_sundays=bool(_pick(payload, "worksSundays", "works_sundays")),
    )
    logger.debug("Built timeline {} with {} top-level tasks", timeline.id, len(tasks))
    return timeline
