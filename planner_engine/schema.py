"""Core data schema for tasks, activities and schedules."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

OVERLOAD_MINUTES = 480

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def majority(counts: Counter) -> Optional[tuple[int, int]]:
    """Return (bucket, count) of the most frequent bucket, lowest bucket on ties."""

    if not counts:
        return None
    return min(counts.items(), key=lambda item: (-item[1], item[0]))


class ItemKind(Enum):
    """Kind of a schedule item."""

    TASK = "task"
    BREAK = "break"
    MEAL = "meal"


class DayPeriod(Enum):
    """Four fixed day-periods used to correlate categories with time of day."""

    MORNING = 0
    AFTERNOON = 1
    EVENING = 2
    NIGHT = 3

    @classmethod
    def of_hour(cls, hour: int) -> "DayPeriod":
        if 5 <= hour < 12:
            return cls.MORNING
        if 12 <= hour < 18:
            return cls.AFTERNOON
        if 18 <= hour < 22:
            return cls.EVENING
        return cls.NIGHT

    def contains(self, hour: int) -> bool:
        return DayPeriod.of_hour(hour) is self

    @property
    def label(self) -> str:
        return self.name.lower()


class PatternKind(Enum):
    """Recurrence kinds recognised in activity history."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class WeatherKind(Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    SNOWY = "snowy"


@dataclass
class Task:
    """A pending or completed unit of work owned by the task store."""

    id: int
    title: str
    category: str = ""
    priority: int = 3
    difficulty: int = 3
    estimated_duration: int = 0
    description: str = ""
    due_date: Optional[datetime] = None
    scheduled_date: Optional[date] = None
    completed: bool = False
    completion_date: Optional[datetime] = None
    actual_duration: int = 0

    @property
    def has_estimate(self) -> bool:
        return self.estimated_duration > 0

    def mark_completed(self, when: datetime, actual_minutes: int = 0) -> None:
        self.completed = True
        self.completion_date = when
        if actual_minutes > 0:
            self.actual_duration = actual_minutes


@dataclass
class ScheduleItem:
    """One block of a daily schedule."""

    kind: ItemKind
    title: str
    start: datetime
    end: datetime
    task_id: Optional[int] = None
    description: str = ""
    completed: bool = False

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(f"Schedule item '{self.title}' must end after it starts")
        if self.kind is not ItemKind.TASK:
            self.task_id = None

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "ScheduleItem") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass
class Schedule:
    """Ordered, non-overlapping agenda for one date."""

    date: date
    items: list[ScheduleItem] = field(default_factory=list)
    approved: bool = False
    completed: bool = False
    productivity_score: float = 0.0

    def set_productivity_score(self, value: float) -> None:
        self.productivity_score = max(0.0, min(100.0, float(value)))

    def sort_items(self) -> None:
        self.items.sort(key=lambda item: (item.start, item.end))

    def task_items(self) -> list[ScheduleItem]:
        return [item for item in self.items if item.kind is ItemKind.TASK]

    def task_minutes(self) -> int:
        return sum(item.duration_minutes for item in self.task_items())

    def total_minutes(self) -> int:
        return sum(item.duration_minutes for item in self.items)

    def is_overloaded(self) -> bool:
        return self.task_minutes() > OVERLOAD_MINUTES


@dataclass
class UserPreferences:
    """Working hours, meal and break preferences, indexed by weekday (Monday=0)."""

    work_start_hours: dict[int, int] = field(default_factory=lambda: {day: 9 for day in range(7)})
    work_end_hours: dict[int, int] = field(default_factory=lambda: {day: 17 for day in range(7)})
    work_days: set[int] = field(default_factory=lambda: {0, 1, 2, 3, 4})
    include_breakfast: bool = True
    include_lunch: bool = True
    include_dinner: bool = True
    include_breaks: bool = True
    break_duration: int = 15
    short_break_duration: int = 5
    long_break_duration: int = 15
    sessions_before_long_break: int = 4
    preferred_categories: list[str] = field(default_factory=list)

    def work_hours(self, weekday: int) -> tuple[int, int]:
        return self.work_start_hours.get(weekday, 9), self.work_end_hours.get(weekday, 17)

    def is_work_day(self, weekday: int) -> bool:
        return weekday in self.work_days

    def set_work_hours(self, weekday: int, start: int, end: int) -> None:
        """Override one weekday's hours; out-of-range values are ignored."""

        if not 0 <= weekday <= 6:
            return
        if 0 <= start <= 23:
            self.work_start_hours[weekday] = start
        if 0 <= end <= 24:
            self.work_end_hours[weekday] = end


@dataclass(frozen=True)
class UserActivity:
    """Completed record of an activity, the training signal for all models."""

    title: str
    category: str
    start: datetime
    end: datetime
    productivity_score: float = 0.0
    completed: bool = True
    description: str = ""

    @property
    def duration_minutes(self) -> int:
        return max(0, int((self.end - self.start).total_seconds() // 60))


@dataclass
class TaskPattern:
    """Recurrence recognised for one task title."""

    title: str
    kind: PatternKind
    confidence: float
    hour_of_day: Optional[int] = None
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("Confidence must be between 0.0 and 1.0")


@dataclass(frozen=True)
class CalendarEvent:
    title: str
    start: datetime
    end: datetime
