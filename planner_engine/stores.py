"""Storage interfaces consumed by the planner, with in-memory implementations."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Callable, Optional, Protocol

from planner_engine.schema import Task, UserActivity, UserPreferences


class TaskStore(Protocol):
    def list(self, predicate: Optional[Callable[[Task], bool]] = None) -> list[Task]: ...

    def update(self, task: Task) -> None: ...

    def get(self, task_id: int) -> Task: ...


class PreferencesStore(Protocol):
    def get(self) -> Optional[UserPreferences]: ...


class ActivityStore(Protocol):
    def append(self, activity: UserActivity) -> None: ...

    def list_by_title(self, title: str) -> list[UserActivity]: ...

    def list_all(self) -> list[UserActivity]: ...


class InMemoryTaskStore:
    def __init__(self, tasks: Optional[list[Task]] = None) -> None:
        self._tasks = {task.id: replace(task) for task in tasks or []}

    def list(self, predicate: Optional[Callable[[Task], bool]] = None) -> list[Task]:
        tasks = [replace(task) for task in self._tasks.values()]
        return [task for task in tasks if predicate is None or predicate(task)]

    def update(self, task: Task) -> None:
        self._tasks[task.id] = replace(task)

    def get(self, task_id: int) -> Task:
        if task_id not in self._tasks:
            raise KeyError(f"Unknown task id {task_id}")
        return replace(self._tasks[task_id])


class InMemoryPreferencesStore:
    def __init__(self, preferences: Optional[UserPreferences] = None) -> None:
        self._preferences = preferences

    def get(self) -> Optional[UserPreferences]:
        return self._preferences


class InMemoryActivityStore:
    """Append-only activity history; records are immutable once stored."""

    def __init__(self, activities: Optional[list[UserActivity]] = None) -> None:
        self._lock = threading.Lock()
        self._activities: list[UserActivity] = list(activities or [])

    def append(self, activity: UserActivity) -> None:
        with self._lock:
            self._activities.append(activity)

    def list_by_title(self, title: str) -> list[UserActivity]:
        with self._lock:
            return [activity for activity in self._activities if activity.title == title]

    def list_all(self) -> list[UserActivity]:
        with self._lock:
            return list(self._activities)
