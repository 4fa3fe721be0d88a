"""Client-facing views of timelines at a query date."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from progress_engine.config import settings
from progress_engine.dates import DateLike, date_key, parse_date
from progress_engine.filters import TaskFilter, filter_task_views
from progress_engine.progress import actual_progress_at, planned_progress_at, was_edited_on
from progress_engine.schema import EMPLOYEE, ProgressMeasurement, Task, Timeline
from progress_engine.status import execution_status, overall_status

_OPTIONAL_KEYS = ("cost", "hierarchy", "actual_start_date", "actual_end_date", "subtasks")


@dataclass
class _TaskViewBase:
    id: str
    name: str
    start_date: datetime
    end_date: datetime
    weight: float
    duration: int
    hierarchy: Optional[str]
    planned_progress: float
    actual_progress: float
    is_edited_today: bool
    actual_start_date: Optional[datetime]
    actual_end_date: Optional[datetime]
    execution_status: str
    overall_status: str
    subtasks: Optional[list[TaskView]]

    def as_dict(self) -> dict[str, Any]:
        payload = {
            "id": self.id,
            "name": self.name,
            "start_date": date_key(self.start_date),
            "end_date": date_key(self.end_date),
            "weight": self.weight,
            "duration": self.duration,
            "cost": getattr(self, "cost", None),
            "hierarchy": self.hierarchy,
            "planned_progress": self.planned_progress,
            "actual_progress": self.actual_progress,
            "is_edited_today": self.is_edited_today,
            "actual_start_date": date_key(self.actual_start_date) if self.actual_start_date else None,
            "actual_end_date": date_key(self.actual_end_date) if self.actual_end_date else None,
            "execution_status": self.execution_status,
            "overall_status": self.overall_status,
            "subtasks": [view.as_dict() for view in self.subtasks] if self.subtasks is not None else None,
        }
        return {key: value for key, value in payload.items() if key not in _OPTIONAL_KEYS or value is not None}


@dataclass
class RedactedTaskView(_TaskViewBase):
    """Task view without cost, served to the lowest permission tier."""


@dataclass
class FullTaskView(_TaskViewBase):
    """Task view including cost."""

    cost: Optional[float] = None


TaskView = Union[FullTaskView, RedactedTaskView]


@dataclass
class TimelineView:
    id: str
    name: str
    currency: Optional[str]
    created_at: datetime
    planned_progress: dict[str, float]
    actual_progress: Optional[dict[str, ProgressMeasurement]]
    tasks: list[TaskView]

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "created_at": date_key(self.created_at),
            "planned_progress": dict(self.planned_progress),
            "tasks": [view.as_dict() for view in self.tasks],
        }
        if self.currency is not None:
            payload["currency"] = self.currency
        if self.actual_progress is not None:
            payload["actual_progress"] = {key: m.as_dict() for key, m in self.actual_progress.items()}
        return payload


def project_task(task: Task, at: DateLike, permission: Optional[str] = None) -> TaskView:
    """Resolve ``task`` and its subtasks at ``at``, redacting cost for employees."""

    permission = permission or settings.default_permission
    at_dt = parse_date(at)

    subtasks = None
    if task.subtasks is not None:
        subtasks = [project_task(subtask, at_dt, permission) for subtask in task.subtasks]

    fields = {
        "id": task.id,
        "name": task.name,
        "start_date": task.start_date,
        "end_date": task.end_date,
        "weight": task.weight,
        "duration": task.duration,
        "hierarchy": task.hierarchy,
        "planned_progress": planned_progress_at(task, at_dt),
        "actual_progress": actual_progress_at(task, at_dt),
        "is_edited_today": was_edited_on(task, at_dt),
        "actual_start_date": task.actual_start_date,
        "actual_end_date": task.actual_end_date,
        "execution_status": execution_status(task),
        "overall_status": overall_status(task, at_dt),
        "subtasks": subtasks,
    }
    if permission == EMPLOYEE:
        return RedactedTaskView(**fields)
    return FullTaskView(cost=task.cost, **fields)


def project_timeline(
    timeline: Timeline,
    at: DateLike,
    permission: Optional[str] = None,
    task_filter: Optional[TaskFilter] = None,
) -> TimelineView:
    """Build the view of ``timeline`` at ``at``; timeline-level maps pass through as copies."""

    views = [project_task(task, at, permission) for task in timeline.tasks]
    if task_filter is not None:
        views = filter_task_views(views, task_filter)

    return TimelineView(
        id=timeline.id,
        name=timeline.name,
        currency=timeline.currency,
        created_at=timeline.created_at,
        planned_progress=dict(timeline.planned_progress),
        actual_progress=dict(timeline.actual_progress) if timeline.actual_progress is not None else None,
        tasks=views,
    )
