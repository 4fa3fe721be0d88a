"""Status and date-window filtering of projected task trees."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional

from progress_engine.dates import DateLike, parse_date
from progress_engine.errors import ValidationFailedError
from progress_engine.schema import (
    EXECUTION_STATUSES,
    IN_PROGRESS,
    OVERALL_STATUSES,
    PLANNED_STATUSES,
    TO_COMPLETE,
    TO_START,
)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def planned_status(planned_progress: float) -> str:
    """Bucket a planned fraction into to_start / in_progress / to_complete."""

    if planned_progress <= 0:
        return TO_START
    if planned_progress >= 1:
        return TO_COMPLETE
    return IN_PROGRESS


@dataclass
class TaskFilter:
    """Criteria a task view must satisfy; empty criteria match everything."""

    planned_status: list[str] = field(default_factory=list)
    execution_status: list[str] = field(default_factory=list)
    overall_status: list[str] = field(default_factory=list)
    start_date: Optional[DateLike] = None
    end_date: Optional[DateLike] = None

    def __post_init__(self) -> None:
        for name, allowed in (
            ("planned_status", PLANNED_STATUSES),
            ("execution_status", EXECUTION_STATUSES),
            ("overall_status", OVERALL_STATUSES),
        ):
            values = _as_list(getattr(self, name))
            unknown = [value for value in values if value not in allowed]
            if unknown:
                raise ValidationFailedError(name, f"invalid {name} values {unknown}")
            setattr(self, name, values)

        if self.start_date is not None:
            self.start_date = parse_date(self.start_date)
        if self.end_date is not None:
            self.end_date = parse_date(self.end_date)

    def matches(self, view) -> bool:
        if self.planned_status and planned_status(view.planned_progress) not in self.planned_status:
            return False
        if self.execution_status and view.execution_status not in self.execution_status:
            return False
        if self.overall_status and view.overall_status not in self.overall_status:
            return False
        return self._overlaps(parse_date(view.start_date), parse_date(view.end_date))

    def _overlaps(self, start: datetime, end: datetime) -> bool:
        if self.end_date is not None and start > self.end_date:
            return False
        if self.start_date is not None and end < self.start_date:
            return False
        return True


def filter_task_views(views: list, task_filter: TaskFilter) -> list:
    """Prune a view tree to matching tasks and the ancestors of matching subtasks."""

    kept = []
    for view in views:
        subtasks = filter_task_views(view.subtasks, task_filter) if view.subtasks else None
        if subtasks or task_filter.matches(view):
            if view.subtasks is not None:
                view = replace(view, subtasks=subtasks or [])
            kept.append(view)
    return kept
