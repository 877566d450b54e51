"""Demo script for planner-engine."""

import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from planner_engine.metrics import schedule_metrics
from planner_engine.schema import UserPreferences
from planner_engine.service import PlannerService
from planner_engine.simulation import generate_demo_tasks, simulate_history


def main() -> None:
    today = date.today()
    history = simulate_history(today - timedelta(days=28), 28)

    service = PlannerService()
    service.analyze_history(history)
    schedule = service.generate_schedule(today, generate_demo_tasks(today), UserPreferences())

    for item in schedule.items:
        print(f"{item.start:%H:%M}-{item.end:%H:%M}  {item.kind.value:<5}  {item.title}")
    print("Metrics:", schedule_metrics(schedule))
    print("Tip:", service.productivity_tip())
    for title in service.patterns.titles():
        print("Pattern:", title, "-", service.patterns.pattern_description(title))


if __name__ == "__main__":
    main()
