"""CSV adapter for activities and tasks."""

from __future__ import annotations

import csv

from planner_engine.adapters.records import activity_from_row, task_from_row
from planner_engine.schema import Task, UserActivity


def _read_rows(file_path: str) -> list[dict]:
    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []
        return list(reader)


def parse_activities(file_path: str) -> list[UserActivity]:
    """Parse a CSV file into activities, skipping unusable rows."""

    activities = []
    for row_number, row in enumerate(_read_rows(file_path), start=2):
        activity = activity_from_row(row, f"Row {row_number}")
        if activity is not None:
            activities.append(activity)
    return activities


def parse_tasks(file_path: str) -> list[Task]:
    """Parse a CSV file into tasks, skipping rows without a title."""

    tasks = []
    for row_number, row in enumerate(_read_rows(file_path), start=2):
        task = task_from_row(row, f"Row {row_number}", fallback_id=row_number - 1)
        if task is not None:
            tasks.append(task)
    return tasks
