"""Streamlit demo UI for planner-engine."""

from __future__ import annotations

import tempfile
from datetime import date, timedelta
from pathlib import Path
from typing import Any

from planner_engine.adapters import csv_adapter, json_adapter
from planner_engine.context import ContextAdvisor, SimulatedWeather
from planner_engine.metrics import schedule_metrics
from planner_engine.schema import UserPreferences
from planner_engine.service import PlannerService
from planner_engine.simulation import generate_demo_tasks, simulate_history


def _parse_activities_from_path(file_path: str) -> list:
    suffix = Path(file_path).suffix.lower()
    if suffix == ".csv":
        return csv_adapter.parse_activities(file_path)
    if suffix == ".json":
        return json_adapter.parse_activities(file_path)
    raise ValueError("Unsupported file type. Please use .csv or .json")


def _parse_uploaded(uploaded_file) -> list:
    suffix = Path(uploaded_file.name).suffix.lower()
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as handle:
        handle.write(uploaded_file.getbuffer())
        temp_path = handle.name
    return _parse_activities_from_path(temp_path)


def run_planner(history: list, day: date, preferences: UserPreferences, use_weather: bool) -> dict[str, Any]:
    """Learn from ``history``, plan ``day`` and return a UI-friendly payload."""

    advisor = ContextAdvisor(weather=SimulatedWeather()) if use_weather else None
    service = PlannerService(advisor=advisor)
    service.analyze_history(history)

    tasks = generate_demo_tasks(day)
    schedule = service.generate_schedule(day, tasks, preferences)
    patterns = {title: service.patterns.pattern_description(title) for title in service.patterns.titles()}

    return {
        "tasks": tasks,
        "schedule": schedule,
        "metrics": schedule_metrics(schedule),
        "warning": service.overload_warning(schedule),
        "tip": service.productivity_tip(),
        "hour_scores": service.habits.hour_scores(),
        "patterns": patterns,
        "weather": advisor.forecast(day) if advisor else None,
    }


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Planner Engine Demo", layout="wide")
    st.title("Planner Engine: Streamlit Demo")

    with st.sidebar:
        st.header("Controls")
        uploaded = st.file_uploader("Upload activity history", type=["csv", "json"])
        use_demo = st.checkbox("Simulate demo history", value=True)
        day = st.date_input("Day to plan", value=date.today())
        work_start = st.slider("Work start", min_value=0, max_value=23, value=9)
        work_end = st.slider("Work end", min_value=1, max_value=24, value=17)
        if work_end <= work_start:
            st.warning("Work end was before start; it will be adjusted to one hour after start.")
            work_end = work_start + 1
        include_breaks = st.checkbox("Include breaks", value=True)
        include_meals = st.checkbox("Include meals", value=True)
        use_weather = st.checkbox("Defer outdoor tasks on bad weather", value=False)
        run = st.button("Plan day", type="primary")

    if not run:
        st.info("Configure inputs in the sidebar and click **Plan day**.")
        return

    try:
        if use_demo:
            history = simulate_history(day - timedelta(days=28), 28)
            data_source = "simulated history (28 days)"
        elif uploaded is not None:
            history = _parse_uploaded(uploaded)
            data_source = f"uploaded file ({uploaded.name})"
        else:
            st.error("Please upload a CSV/JSON file or enable 'Simulate demo history'.")
            return

        preferences = UserPreferences(
            include_breaks=include_breaks,
            include_breakfast=include_meals,
            include_lunch=include_meals,
            include_dinner=include_meals,
            work_days=set(range(7)),
        )
        preferences.set_work_hours(day.weekday(), int(work_start), int(work_end))

        result = run_planner(history, day, preferences, use_weather)

        st.success(f"Learned from {len(history)} activities from {data_source}.")

        st.subheader("A) Schedule")
        metrics = result["metrics"]
        c1, c2, c3 = st.columns(3)
        c1.metric("Items", metrics["items"])
        c2.metric("Task minutes", metrics["task_minutes"])
        c3.metric("Overloaded", "yes" if metrics["overloaded"] else "no")
        if result["warning"]:
            st.warning(result["warning"])
        rows = [
            {"start": f"{item.start:%H:%M}", "end": f"{item.end:%H:%M}", "kind": item.kind.value, "title": item.title}
            for item in result["schedule"].items
        ]
        if rows:
            st.table(rows)
        else:
            st.write("Nothing to schedule for this day.")

        st.subheader("B) Habits")
        st.write(result["tip"])
        st.bar_chart(result["hour_scores"])

        st.subheader("C) Recurring Patterns")
        st.table([{"title": title, "pattern": text} for title, text in result["patterns"].items()] or [{}])

        if result["weather"] is not None:
            st.subheader("D) Weather")
            st.write(f"Forecast: {result['weather'].value}")

    except ValueError as exc:
        st.error(f"Input error: {exc}")
    except Exception:
        st.error("Something went wrong while running the demo. Please verify the input format.")


if __name__ == "__main__":
    main()
