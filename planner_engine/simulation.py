"""Deterministic demo data for tasks and activity history."""

from __future__ import annotations

import random
from datetime import date, datetime, time, timedelta
from itertools import count
from typing import Optional

from planner_engine.schema import Task, UserActivity

# title, description, category, priority, difficulty, minutes, weekdays (Monday=0)
_DEMO_TASKS = (
    ("Team meeting", "Discuss weekly goals", "Work", 4, 3, 60, (0, 2)),
    ("Prepare presentation", "Finish the client slides", "Work", 3, 3, 90, (1, 3)),
    ("Answer emails", "Clear the inbox", "Work", 2, 1, 45, (0, 1, 2, 3, 4)),
    ("Workout", "30 minutes of cardio", "Personal", 3, 2, 30, (1, 3, 5)),
    ("Code review", "Go through open pull requests", "Work", 3, 4, 60, (4,)),
    ("Meditation", "Guided meditation session", "Personal", 2, 1, 20, (2, 6)),
    ("Weekly planning", "Organise the week's tasks", "Organisation", 4, 2, 45, (0,)),
    ("Reading", "Continue the current book", "Personal", 2, 1, 60, (4, 5, 6)),
)

# title, category, hour, minutes, weekdays, score
_ROUTINES = (
    ("Yoga", "Health", 7, 45, (0, 1, 2, 3, 4, 5, 6), 4.0),
    ("Answer emails", "Work", 9, 40, (0, 1, 2, 3, 4), 3.0),
    ("Deep work", "Work", 10, 120, (0, 1, 2, 3, 4), 4.5),
    ("Weekly planning", "Organisation", 16, 45, (4,), 3.5),
    ("Reading", "Personal", 21, 50, (5, 6), 2.5),
)


def generate_demo_tasks(day: date, rng: Optional[random.Random] = None, inclusion_rate: float = 0.4) -> list[Task]:
    """Tasks for ``day`` from a weekday table.

    Tasks not planned for that weekday are still included with probability
    ``inclusion_rate``, drawn from ``rng`` so runs can be reproduced.
    """

    rng = rng or random.Random(day.toordinal())
    due = datetime.combine(day, time(23, 59))
    ids = count(1)

    tasks = []
    for title, description, category, priority, difficulty, minutes, weekdays in _DEMO_TASKS:
        task_id = next(ids)
        if day.weekday() not in weekdays and rng.random() >= inclusion_rate:
            continue
        tasks.append(
            Task(
                id=task_id,
                title=title,
                description=description,
                category=category,
                priority=priority,
                difficulty=difficulty,
                estimated_duration=minutes,
                due_date=due,
                scheduled_date=day,
            )
        )
    return tasks


def simulate_history(start: date, days: int, rng: Optional[random.Random] = None) -> list[UserActivity]:
    """Activity history following fixed routines with jittered start and score."""

    rng = rng or random.Random(42)
    activities = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        for title, category, hour, minutes, weekdays, score in _ROUTINES:
            if day.weekday() not in weekdays:
                continue
            begin = datetime.combine(day, time(hour)) + timedelta(minutes=rng.choice((0, 5, 10, 15)))
            length = max(5, minutes + rng.randint(-10, 10))
            activities.append(
                UserActivity(
                    title=title,
                    category=category,
                    start=begin,
                    end=begin + timedelta(minutes=length),
                    productivity_score=round(max(0.0, min(5.0, score + rng.uniform(-1.0, 1.0))), 2),
                    completed=True,
                )
            )
    return activities
