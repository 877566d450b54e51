"""Plan one day from CSV/JSON tasks and activity history."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from planner_engine.adapters import csv_adapter, json_adapter
from planner_engine.config import load_config
from planner_engine.context import ContextAdvisor, SimulatedWeather
from planner_engine.metrics import schedule_metrics
from planner_engine.schema import UserPreferences
from planner_engine.service import PlannerService


def _load(path: Path, kind: str):
    suffix = path.suffix.lower()
    adapter = {".csv": csv_adapter, ".json": json_adapter}.get(suffix)
    if adapter is None:
        raise ValueError("Unsupported input format, expected .csv or .json")
    return getattr(adapter, f"parse_{kind}")(str(path))


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a daily schedule")
    parser.add_argument("--tasks", required=True, help="Path to CSV/JSON tasks file")
    parser.add_argument("--history", help="Path to CSV/JSON activity history")
    parser.add_argument("--preferences", help="Path to JSON preferences")
    parser.add_argument("--config", help="Path to YAML planner config")
    parser.add_argument("--date", default=date.today().isoformat(), help="Day to plan (YYYY-MM-DD)")
    parser.add_argument("--weather", action="store_true", help="Defer outdoor tasks using simulated weather")
    parser.add_argument("--out", default="outputs/schedule.json", help="Where to save the schedule JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    day = date.fromisoformat(args.date)
    advisor = ContextAdvisor(weather=SimulatedWeather()) if args.weather else None
    service = PlannerService(config=load_config(args.config), advisor=advisor)

    if args.history:
        service.analyze_history(_load(Path(args.history), "activities"))
    preferences = json_adapter.parse_preferences(args.preferences) if args.preferences else UserPreferences()

    tasks = _load(Path(args.tasks), "tasks")
    schedule = service.generate_schedule(day, tasks, preferences)

    report = json_adapter.schedule_to_dict(schedule)
    report["metrics"] = schedule_metrics(schedule)
    report["tip"] = service.productivity_tip()
    print(json.dumps(report, indent=2))

    out_path = json_adapter.dump_schedule(schedule, args.out)
    print(f"Saved schedule to {out_path}")


if __name__ == "__main__":
    main()
