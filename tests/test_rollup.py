from itertools import permutations

from progress_engine.dates import parse_date
from progress_engine.rollup import iter_tasks, sum_date_status, sum_execution, task_date_status, task_execution
from progress_engine.schema import ProgressMeasurement, Task
from progress_engine.status import execution_status


def make_task(task_id, last_progress=None, subtasks=None):
    actual = None
    if last_progress is not None:
        actual = {
            "2023-01-05T00:00:00Z": ProgressMeasurement(
                last_progress, parse_date("2023-01-05"), parse_date("2023-01-05")
            )
        }
    return Task(
        id=task_id,
        name=f"Task {task_id}",
        start_date=parse_date("2023-01-01"),
        end_date=parse_date("2023-01-11"),
        weight=1.0,
        duration=10,
        planned_progress={"2023-01-01T00:00:00Z": 0.0, "2023-01-06T00:00:00Z": 0.5},
        actual_progress=actual,
        subtasks=subtasks,
    )


def sample_tree():
    return [
        make_task(
            "1",
            0.4,
            subtasks=[
                make_task("1.1", 1.0, subtasks=[make_task("1.1.1", 1.0), make_task("1.1.2", 0.0, subtasks=[])]),
                make_task("1.2", 0.2),
            ],
        ),
        make_task("2"),
        make_task("3", 0.9, subtasks=[make_task("3.1", 0.5)]),
    ]


def test_iter_tasks_visits_every_task_once():
    ids = [task.id for task in iter_tasks(sample_tree())]
    assert sorted(ids) == sorted(["1", "1.1", "1.1.1", "1.1.2", "1.2", "2", "3", "3.1"])


def test_execution_rollup_of_single_task_includes_descendants():
    first = sample_tree()[0]
    assert task_execution(first) == {"planned": 1, "started": 2, "completed": 2}
    assert task_execution(make_task("leaf")) == {"planned": 1, "started": 0, "completed": 0}


def test_execution_rollup_matches_flattened_list_in_any_order():
    tree = sample_tree()
    flattened = list(iter_tasks(tree))
    expected = {"planned": 0, "started": 0, "completed": 0}
    for task in flattened:
        expected[execution_status(task)] += 1

    for ordering in permutations(tree):
        assert sum_execution(ordering) == expected

    per_task = [task_execution(task) for task in tree]
    assert {key: sum(counts[key] for counts in per_task) for key in expected} == expected


def test_date_status_rollup():
    tree = sample_tree()
    at = "2023-01-06"
    counts = sum_date_status(tree, at)
    assert sum(counts.values()) == 8
    # planned is 0.5 for every task at the query date
    assert counts == {"on_time": 1, "ahead": 3, "delayed": 4}
    assert task_date_status(tree[1], at) == {"on_time": 0, "ahead": 0, "delayed": 1}


def test_rollups_of_empty_forest():
    assert sum_execution([]) == {"planned": 0, "started": 0, "completed": 0}
    assert sum_date_status([], "2023-01-06") == {"on_time": 0, "ahead": 0, "delayed": 0}
