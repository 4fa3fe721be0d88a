import pytest

from progress_engine.dates import parse_date
from progress_engine.errors import NotFoundError
from progress_engine.history import measurement_history
from progress_engine.schema import ProgressMeasurement, Timeline


def make_timeline(timeline_id, created_at, *points):
    return Timeline(
        id=timeline_id,
        name=timeline_id,
        created_at=parse_date(created_at),
        actual_progress={
            f"{day}T00:00:00Z": ProgressMeasurement(value, parse_date(day), parse_date(day)) for day, value in points
        },
    )


def test_history_sorted_by_measurement_date_descending():
    timelines = [
        make_timeline("a", "2024-01-01", ("2024-01-05", 0.1), ("2024-01-20", 0.3)),
        make_timeline("b", "2024-02-01", ("2024-01-10", 0.2)),
        Timeline(id="c", name="c", created_at=parse_date("2024-03-01")),
    ]
    history = measurement_history(timelines)
    assert [m.progress_percentage for m in history] == [0.3, 0.2, 0.1]


def test_history_requires_timelines():
    with pytest.raises(NotFoundError):
        measurement_history([])
