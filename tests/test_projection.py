import copy

from progress_engine.dates import parse_date
from progress_engine.projection import FullTaskView, RedactedTaskView, project_task, project_timeline
from progress_engine.schema import ProgressMeasurement, Task, Timeline


def measurement(value, day):
    return ProgressMeasurement(value, parse_date(day), parse_date(day))


def sample_timeline():
    subtask = Task(
        id="1.1",
        name="Excavation",
        start_date=parse_date("2024-03-01"),
        end_date=parse_date("2024-03-03"),
        weight=1.0,
        duration=2,
        cost=40000.0,
        hierarchy="1.1",
        planned_progress={"2024-03-01T00:00:00Z": 0.0, "2024-03-02T00:00:00Z": 0.5},
        actual_progress={"2024-03-02T00:00:00Z": measurement(1.0, "2024-03-02")},
        actual_end_date=parse_date("2024-03-02"),
    )
    task = Task(
        id="1",
        name="Foundation",
        start_date=parse_date("2024-03-01"),
        end_date=parse_date("2024-03-06"),
        weight=1.0,
        duration=5,
        cost=120000.0,
        hierarchy="1",
        planned_progress={"2024-03-01T00:00:00Z": 0.0, "2024-03-03T00:00:00Z": 0.4},
        actual_progress={"2024-03-02T00:00:00Z": measurement(0.2, "2024-03-02")},
        subtasks=[subtask],
    )
    return Timeline(
        id="tl-1",
        name="Warehouse",
        created_at=parse_date("2024-02-20T12:00:00Z"),
        currency="BRL",
        planned_progress={"2024-03-01T00:00:00Z": 0.0, "2024-03-06T00:00:00Z": 1.0},
        actual_progress={"2024-03-02T00:00:00Z": measurement(0.1, "2024-03-02")},
        tasks=[task],
    )


def test_employee_view_redacts_cost():
    view = project_task(sample_timeline().tasks[0], "2024-03-03", permission="employee")
    assert isinstance(view, RedactedTaskView)
    assert not hasattr(view, "cost")
    payload = view.as_dict()
    assert "cost" not in payload
    assert "cost" not in payload["subtasks"][0]


def test_privileged_view_includes_cost():
    view = project_task(sample_timeline().tasks[0], "2024-03-03", permission="admin")
    assert isinstance(view, FullTaskView)
    assert view.cost == 120000.0
    assert view.subtasks[0].cost == 40000.0


def test_default_permission_is_least_privilege():
    assert isinstance(project_task(sample_timeline().tasks[0], "2024-03-03"), RedactedTaskView)


def test_task_view_resolves_progress_at_query_date():
    view = project_task(sample_timeline().tasks[0], "2024-03-03T10:00:00Z", permission="owner")
    assert view.planned_progress == 0.4
    assert view.actual_progress == 0.2
    assert view.is_edited_today is False
    assert view.execution_status == "started"
    assert view.overall_status == "delayed"

    payload = view.as_dict()
    assert payload["start_date"] == "2024-03-01T00:00:00Z"
    assert payload["hierarchy"] == "1"
    assert "actual_end_date" not in payload

    subtask = payload["subtasks"][0]
    assert subtask["execution_status"] == "completed"
    assert subtask["overall_status"] == "ahead"
    assert subtask["actual_end_date"] == "2024-03-02T00:00:00Z"


def test_edited_today_flag_in_view():
    view = project_task(sample_timeline().tasks[0], "2024-03-02T18:00:00Z", permission="admin")
    assert view.is_edited_today is True


def test_timeline_view_passes_maps_through_unchanged():
    timeline = sample_timeline()
    before = copy.deepcopy(timeline)

    view = project_timeline(timeline, "2024-03-03", permission="admin")
    payload = view.as_dict()

    assert view.planned_progress == timeline.planned_progress
    assert view.actual_progress == timeline.actual_progress
    assert payload["currency"] == "BRL"
    assert payload["created_at"] == "2024-02-20T12:00:00Z"
    assert payload["actual_progress"]["2024-03-02T00:00:00Z"]["progress_percentage"] == 0.1

    view.planned_progress["2024-03-09T00:00:00Z"] = 0.5
    assert timeline == before
