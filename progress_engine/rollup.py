"""Status counts rolled up through task trees."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator

from progress_engine.dates import DateLike
from progress_engine.schema import EXECUTION_STATUSES, OVERALL_STATUSES, Task
from progress_engine.status import execution_status, overall_status


def iter_tasks(tasks: Iterable[Task]) -> Iterator[Task]:
    """Yield every task and all of its descendants exactly once."""

    stack = list(tasks)
    while stack:
        task = stack.pop()
        yield task
        if task.subtasks:
            stack.extend(task.subtasks)


def _counts(statuses: Iterable[str], buckets: tuple[str, ...]) -> dict[str, int]:
    counter = Counter(statuses)
    return {bucket: counter[bucket] for bucket in buckets}


def task_execution(task: Task) -> dict[str, int]:
    """Count planned/started/completed over ``task`` and its subtasks."""

    return sum_execution([task])


def task_date_status(task: Task, now: DateLike) -> dict[str, int]:
    """Count on_time/ahead/delayed over ``task`` and its subtasks."""

    return sum_date_status([task], now)


def sum_execution(tasks: Iterable[Task]) -> dict[str, int]:
    return _counts((execution_status(task) for task in iter_tasks(tasks)), EXECUTION_STATUSES)


def sum_date_status(tasks: Iterable[Task], now: DateLike) -> dict[str, int]:
    return _counts((overall_status(task, now) for task in iter_tasks(tasks)), OVERALL_STATUSES)
