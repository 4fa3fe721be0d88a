"""Core data schema for timeline snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from progress_engine.dates import date_key

PLANNED = "planned"
STARTED = "started"
COMPLETED = "completed"
EXECUTION_STATUSES = (PLANNED, STARTED, COMPLETED)

ON_TIME = "on_time"
AHEAD = "ahead"
DELAYED = "delayed"
OVERALL_STATUSES = (ON_TIME, AHEAD, DELAYED)

TO_START = "to_start"
IN_PROGRESS = "in_progress"
TO_COMPLETE = "to_complete"
PLANNED_STATUSES = (TO_START, IN_PROGRESS, TO_COMPLETE)

EMPLOYEE = "employee"


@dataclass
class ProgressMeasurement:
    """One recorded actual-progress value."""

    progress_percentage: float
    measurement_date: datetime
    publication_date: datetime

    def as_dict(self) -> dict:
        return {
            "progress_percentage": self.progress_percentage,
            "measurement_date": date_key(self.measurement_date),
            "publication_date": date_key(self.publication_date),
        }


@dataclass
class Task:
    """A weighted task with planned and actual progress maps keyed by canonical date strings."""

    id: str
    name: str
    start_date: datetime
    end_date: datetime
    weight: float
    duration: int
    planned_progress: dict[str, float] = field(default_factory=dict)
    actual_progress: Optional[dict[str, ProgressMeasurement]] = None
    cost: Optional[float] = None
    hierarchy: Optional[str] = None
    actual_start_date: Optional[datetime] = None
    actual_end_date: Optional[datetime] = None
    subtasks: Optional[list[Task]] = None


@dataclass
class Timeline:
    """One revision of a project's task tree."""

    id: str
    name: str
    created_at: datetime
    planned_progress: dict[str, float] = field(default_factory=dict)
    actual_progress: Optional[dict[str, ProgressMeasurement]] = None
    tasks: list[Task] = field(default_factory=list)
    currency: Optional[str] = None
    project_id: Optional[str] = None
    works_saturdays: bool = False
    works_sundays: bool = False
