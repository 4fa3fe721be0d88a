"""Streamlit demo UI for progress-engine."""

from __future__ import annotations

import tempfile
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any

import numpy as np

from progress_engine.adapters import json_adapter
from progress_engine.config import settings
from progress_engine.dashboard import build_dashboard, project_revisions, select_revisions
from progress_engine.logging_setup import setup_logging
from progress_engine.projection import project_timeline

PERMISSIONS = ["employee", "admin", "owner", "support"]
CURVES = ["planned", "actual", "original"]


def _parse_uploaded(uploaded_file) -> list:
    suffix = Path(uploaded_file.name).suffix.lower()
    if suffix != ".json":
        raise ValueError("Unsupported file type. Please use .json")
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as handle:
        handle.write(uploaded_file.getbuffer())
        temp_path = handle.name
    return json_adapter.parse(temp_path)


def _curve_series(progress_curves: dict[str, dict]) -> dict[str, np.ndarray]:
    series = {}
    for name in CURVES:
        values = [point.get(name) for point in progress_curves.values()]
        series[name] = np.array([np.nan if value is None else value for value in values], dtype=float)
    return series


def _flatten(task_views: list[dict], depth: int = 0) -> list[dict[str, Any]]:
    rows = []
    for view in task_views:
        rows.append(
            {
                "task": "  " * depth + view["name"],
                "planned": round(view["planned_progress"], 3),
                "actual": round(view["actual_progress"], 3),
                "execution": view["execution_status"],
                "status": view["overall_status"],
                "cost": view.get("cost"),
                "edited today": view["is_edited_today"],
            }
        )
        rows.extend(_flatten(view.get("subtasks", []), depth + 1))
    return rows


def run_engine(timelines: list, today: datetime, permission: str) -> dict[str, Any]:
    """Run all engine steps and return a UI-friendly result payload."""

    timelines = project_revisions(timelines)
    latest, original = select_revisions(timelines)
    dashboard = build_dashboard(timelines, today).as_dict()
    view = project_timeline(latest, today, permission=permission).as_dict()
    return {
        "latest_name": latest.name,
        "original_name": original.name if original is not None else None,
        "dashboard": dashboard,
        "curves": _curve_series(dashboard["progress_curves"]),
        "task_rows": _flatten(view["tasks"]),
    }


def main() -> None:
    import streamlit as st

    setup_logging()
    st.set_page_config(page_title="Progress Engine Demo", layout="wide")
    st.title("Progress Engine — Streamlit Demo")

    with st.sidebar:
        st.header("Controls")
        uploaded = st.file_uploader("Upload timeline snapshots", type=["json"])
        use_demo = st.checkbox("Load demo timelines", value=True)
        query_day = st.date_input("Query date", value=date(2024, 3, 5))
        default_index = PERMISSIONS.index(settings.default_permission) if settings.default_permission in PERMISSIONS else 0
        permission = st.selectbox("Permission", options=PERMISSIONS, index=default_index)
        run = st.button("Run engine", type="primary")

    if not run:
        st.info("Configure inputs in the sidebar and click **Run engine**.")
        return

    try:
        if use_demo:
            timelines = json_adapter.parse("examples/sample_timelines.json")
            data_source = "demo timelines (examples/sample_timelines.json)"
        elif uploaded is not None:
            timelines = _parse_uploaded(uploaded)
            data_source = f"uploaded file ({uploaded.name})"
        else:
            st.error("Please upload a JSON file or enable 'Load demo timelines'.")
            return

        today = datetime.combine(query_day, time(12, 0), tzinfo=timezone.utc)
        result = run_engine(timelines, today, permission)
        dashboard = result["dashboard"]

        st.success(f"Loaded {len(timelines)} timelines from {data_source}.")

        st.subheader("A) Schedule")
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Latest revision", result["latest_name"])
        c2.metric("Total days", dashboard["total_days"])
        c3.metric("Elapsed days", dashboard["elapsed_days"])
        c4.metric("Remaining days", dashboard["remaining_days"])

        st.subheader("B) Task Counts")
        e1, e2 = st.columns(2)
        e1.write("**Execution**")
        e1.table([dashboard["task_execution"]])
        e2.write("**Date status**")
        e2.table([dashboard["task_date_status"]])

        st.subheader("C) Progress Curves")
        st.caption(f"Original baseline: {result['original_name'] or 'none'}")
        st.line_chart(result["curves"])

        st.subheader("D) Tasks")
        st.table(result["task_rows"])

    except ValueError as exc:
        st.error(f"Input error: {exc}")
    except LookupError as exc:
        st.error(f"Not found: {exc}")


if __name__ == "__main__":
    main()
