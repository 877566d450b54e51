"""JSON adapter for activities, tasks, preferences and schedules."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from planner_engine.adapters.records import activity_from_row, task_from_row
from planner_engine.schema import Schedule, Task, UserActivity, UserPreferences

logger = logging.getLogger(__name__)

_PREFERENCE_FLAGS = ("include_breakfast", "include_lunch", "include_dinner", "include_breaks")
_PREFERENCE_MINUTES = ("break_duration", "short_break_duration", "long_break_duration", "sessions_before_long_break")


def _load_list(file_path: str) -> list:
    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise ValueError("JSON payload must be a list of objects")
    return payload


def parse_activities(file_path: str) -> list[UserActivity]:
    """Parse a JSON list into activities, skipping unusable items."""

    activities = []
    for index, item in enumerate(_load_list(file_path), start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Item {index}: expected an object")
        activity = activity_from_row(item, f"Item {index}")
        if activity is not None:
            activities.append(activity)
    return activities


def parse_tasks(file_path: str) -> list[Task]:
    """Parse a JSON list into tasks, skipping items without a title."""

    tasks = []
    for index, item in enumerate(_load_list(file_path), start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Item {index}: expected an object")
        task = task_from_row(item, f"Item {index}", fallback_id=index)
        if task is not None:
            tasks.append(task)
    return tasks


def _weekday(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 6:
        return None
    return value


def parse_preferences(file_path: str) -> UserPreferences:
    """Parse a JSON object into preferences; unknown or invalid values keep defaults."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError("Preferences payload must be an object")

    preferences = UserPreferences()
    for name in _PREFERENCE_FLAGS:
        if isinstance(payload.get(name), bool):
            setattr(preferences, name, payload[name])
    for name in _PREFERENCE_MINUTES:
        value = payload.get(name)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            setattr(preferences, name, value)

    work_days = payload.get("work_days")
    if isinstance(work_days, list):
        days = {_weekday(day) for day in work_days}
        if None in days:
            logger.warning("Ignoring invalid work_days entries in %s", file_path)
        preferences.work_days = {day for day in days if day is not None}
    elif work_days is not None:
        logger.warning("work_days in %s must be a list, keeping defaults", file_path)

    if isinstance(payload.get("preferred_categories"), list):
        preferences.preferred_categories = [str(category) for category in payload["preferred_categories"]]

    work_hours = payload.get("work_hours", [])
    if not isinstance(work_hours, list):
        logger.warning("work_hours in %s must be a list, keeping defaults", file_path)
        work_hours = []
    for index, entry in enumerate(work_hours, start=1):
        if not isinstance(entry, dict):
            logger.warning("work_hours entry %d: expected an object, skipping", index)
            continue
        weekday = _weekday(entry.get("weekday"))
        start, end = entry.get("start"), entry.get("end")
        if weekday is None or not isinstance(start, int) or not isinstance(end, int):
            logger.warning("work_hours entry %d: needs integer weekday, start and end, skipping", index)
            continue
        preferences.set_work_hours(weekday, start, end)
    return preferences


def schedule_to_dict(schedule: Schedule) -> dict:
    return {
        "date": schedule.date.isoformat(),
        "approved": schedule.approved,
        "completed": schedule.completed,
        "productivity_score": schedule.productivity_score,
        "overloaded": schedule.is_overloaded(),
        "items": [
            {
                "kind": item.kind.value,
                "title": item.title,
                "start": item.start.strftime("%H:%M"),
                "end": item.end.strftime("%H:%M"),
                "duration_minutes": item.duration_minutes,
                "task_id": item.task_id,
                "completed": item.completed,
            }
            for item in schedule.items
        ],
    }


def dump_schedule(schedule: Schedule, file_path: str) -> Path:
    """Write ``schedule`` as indented JSON and return the output path."""

    out_path = Path(file_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(schedule_to_dict(schedule), indent=2), encoding="utf-8")
    return out_path
