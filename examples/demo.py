"""Demo script for progress-engine."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from progress_engine.adapters.json_adapter import parse
from progress_engine.dashboard import build_dashboard, project_revisions, select_revisions
from progress_engine.history import measurement_history
from progress_engine.logging_setup import setup_logging
from progress_engine.projection import project_timeline


def main() -> None:
    setup_logging()
    today = "2024-03-05T12:00:00Z"
    timelines = project_revisions(parse("examples/sample_timelines.json"))
    latest, original = select_revisions(timelines)

    dashboard = build_dashboard(timelines, today)
    print("Latest:", latest.name, "| Original:", original.name if original else None)
    print("Execution:", dashboard.task_execution)
    print("Date status:", dashboard.task_date_status)
    print("Days:", dashboard.elapsed_days, "elapsed /", dashboard.remaining_days, "remaining")

    for permission in ("employee", "admin"):
        view = project_timeline(latest, today, permission=permission).as_dict()
        print(f"Tasks as {permission}:", [(t["id"], t.get("cost"), t["overall_status"]) for t in view["tasks"]])

    print("History:", [(m.measurement_date.date().isoformat(), m.progress_percentage) for m in measurement_history(timelines)])


if __name__ == "__main__":
    main()
