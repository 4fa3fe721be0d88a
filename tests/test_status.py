from progress_engine.dates import parse_date
from progress_engine.schema import ProgressMeasurement, Task
from progress_engine.status import execution_status, overall_status


def history(*points):
    return {key: ProgressMeasurement(value, parse_date(key), parse_date(key)) for key, value in points}


def sample_task(actual=None, actual_end=None):
    return Task(
        id="t1",
        name="Walls",
        start_date=parse_date("2023-01-01"),
        end_date=parse_date("2023-01-31"),
        weight=1.0,
        duration=30,
        planned_progress={"2023-01-15T00:00:00Z": 0.5},
        actual_progress=actual,
        actual_end_date=parse_date(actual_end) if actual_end else None,
    )


def test_execution_status_from_last_entry():
    assert execution_status(sample_task()) == "planned"
    assert execution_status(sample_task(actual={})) == "planned"
    assert execution_status(sample_task(actual=history(("2023-01-05T00:00:00Z", 0.0)))) == "planned"
    assert execution_status(sample_task(actual=history(("2023-01-05T00:00:00Z", 0.3)))) == "started"
    assert execution_status(sample_task(actual=history(("2023-01-05T00:00:00Z", 1.0)))) == "completed"


def test_execution_status_uses_greatest_key_not_insertion_order():
    completed = history(("2023-01-10T00:00:00Z", 1.0), ("2023-01-01T00:00:00Z", 0.3))
    started = history(("2023-01-10T00:00:00Z", 0.3), ("2023-01-01T00:00:00Z", 1.0))
    assert execution_status(sample_task(actual=completed)) == "completed"
    assert execution_status(sample_task(actual=started)) == "started"


def test_overall_status_tolerance_band():
    at = "2023-01-15"
    assert overall_status(sample_task(actual=history(("2023-01-15T00:00:00Z", 0.3))), at) == "delayed"
    assert overall_status(sample_task(actual=history(("2023-01-15T00:00:00Z", 0.5))), at) == "on_time"
    assert overall_status(sample_task(actual=history(("2023-01-15T00:00:00Z", 0.52))), at) == "on_time"
    assert overall_status(sample_task(actual=history(("2023-01-15T00:00:00Z", 0.56))), at) == "ahead"


def test_overall_status_depends_on_query_date():
    task = sample_task(actual=history(("2023-01-15T00:00:00Z", 0.5)))
    assert overall_status(task, "2022-12-01") == "on_time"
    assert overall_status(task, "2023-02-10") == "delayed"


def test_overall_status_from_actual_end_date():
    lagging = history(("2023-01-15T00:00:00Z", 0.0))
    assert overall_status(sample_task(actual=lagging, actual_end="2023-01-20"), "2023-01-15") == "ahead"
    assert overall_status(sample_task(actual=lagging, actual_end="2023-02-03"), "2023-01-15") == "delayed"
    assert overall_status(sample_task(actual=lagging, actual_end="2023-01-31"), "2023-01-15") == "on_time"
