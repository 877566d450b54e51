"""Schedule outcome metrics."""

from __future__ import annotations

from collections import Counter

from planner_engine.schema import ItemKind, Schedule


def schedule_metrics(schedule: Schedule) -> dict:
    """Compute item counts, minutes per kind and the overload flag."""

    if not schedule.items:
        return {
            "items": 0,
            "count_by_kind": {kind.value: 0 for kind in ItemKind},
            "minutes_by_kind": {kind.value: 0 for kind in ItemKind},
            "task_minutes": 0,
            "overloaded": False,
            "completion_pct": 0.0,
        }

    counts = Counter()
    minutes = Counter()
    for item in schedule.items:
        counts[item.kind.value] += 1
        minutes[item.kind.value] += item.duration_minutes

    return {
        "items": len(schedule.items),
        "count_by_kind": {kind.value: counts[kind.value] for kind in ItemKind},
        "minutes_by_kind": {kind.value: minutes[kind.value] for kind in ItemKind},
        "task_minutes": schedule.task_minutes(),
        "overloaded": schedule.is_overloaded(),
        "completion_pct": completion_score(schedule),
    }


def completion_score(schedule: Schedule) -> float:
    """Percentage of task items marked completed, 0 when there are none."""

    tasks = schedule.task_items()
    if not tasks:
        return 0.0
    return 100.0 * sum(1 for item in tasks if item.completed) / len(tasks)
