"""Greedy daily schedule construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Callable, Iterable, Optional

from planner_engine.config import PlannerConfig, SchedulerSettings, ScoringWeights
from planner_engine.errors import PreconditionError
from planner_engine.habits import HabitModel
from planner_engine.performance import PerformanceModel
from planner_engine.schema import ItemKind, Schedule, ScheduleItem, Task, UserPreferences

logger = logging.getLogger(__name__)


class BreakPolicy(Enum):
    """How breaks are interleaved with placed tasks."""

    EVERY_NTH_ITEM = "every_nth_item"
    SESSIONS = "sessions"


@dataclass(frozen=True)
class MealSlot:
    title: str
    at: time
    minutes: int


BREAKFAST = MealSlot("Breakfast", time(8, 0), 30)
LUNCH = MealSlot("Lunch", time(12, 30), 60)
DINNER = MealSlot("Dinner", time(19, 0), 60)


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def filter_relevant_tasks(
    tasks: list[Task],
    target_date: date,
    preferences: UserPreferences,
    settings: Optional[SchedulerSettings] = None,
) -> list[Task]:
    """Keep the open tasks worth scheduling on ``target_date``."""

    settings = settings or SchedulerSettings()
    open_tasks = [task for task in tasks if not task.completed]

    if not preferences.is_work_day(target_date.weekday()):
        return [task for task in open_tasks if task.priority >= settings.urgent_priority]

    horizon = target_date + timedelta(days=settings.near_due_days)
    relevant = []
    for task in open_tasks:
        due = task.due_date.date() if task.due_date is not None else None
        if due is not None and due <= target_date:
            relevant.append(task)
        elif task.priority >= settings.urgent_priority:
            relevant.append(task)
        elif task.priority >= settings.near_due_priority and due is not None and due <= horizon:
            relevant.append(task)
    return relevant


def sort_by_priority(tasks: list[Task]) -> list[Task]:
    """Priority descending, then earliest due date; undated tasks last."""

    return sorted(
        tasks,
        key=lambda task: (
            -task.priority,
            task.due_date is None,
            task.due_date or datetime.max,
            task.id,
        ),
    )


def score_task(task: Task, moment: datetime, weights: Optional[ScoringWeights] = None) -> int:
    """Greedy placement score of ``task`` if started at ``moment``."""

    weights = weights or ScoringWeights()
    score = task.priority * weights.priority_weight - task.difficulty * weights.difficulty_weight

    if task.due_date is not None:
        days_until_due = int((task.due_date - moment).total_seconds() / 86400)
        if days_until_due <= 1:
            score += weights.due_within_1_day_bonus
        elif days_until_due <= 3:
            score += weights.due_within_3_days_bonus
        elif days_until_due <= 7:
            score += weights.due_within_7_days_bonus
    return score


def work_window(target_date: date, preferences: UserPreferences) -> TimeWindow:
    start_hour, end_hour = preferences.work_hours(target_date.weekday())
    midnight = datetime.combine(target_date, time())
    return TimeWindow(midnight + timedelta(hours=start_hour), midnight + timedelta(hours=end_hour))


def meal_items(target_date: date, preferences: UserPreferences, window: TimeWindow) -> list[ScheduleItem]:
    """Meal reservations that intersect the work window, clipped to it."""

    start_hour, end_hour = preferences.work_hours(target_date.weekday())
    slots = []
    if preferences.include_breakfast and start_hour <= 9:
        slots.append(BREAKFAST)
    if preferences.include_lunch:
        slots.append(LUNCH)
    if preferences.include_dinner and end_hour >= 19:
        slots.append(DINNER)

    items = []
    for slot in slots:
        start = max(datetime.combine(target_date, slot.at), window.start)
        end = min(datetime.combine(target_date, slot.at) + timedelta(minutes=slot.minutes), window.end)
        if end > start:
            items.append(ScheduleItem(ItemKind.MEAL, slot.title, start, end))
    return items


def build_windows(window: TimeWindow, reserved: Iterable[tuple[datetime, datetime]]) -> list[TimeWindow]:
    """Split ``window`` into the free sub-windows left around ``reserved`` intervals."""

    windows = []
    cursor = window.start
    for start, end in sorted(reserved):
        if end <= cursor:
            continue
        if start >= window.end:
            break
        if start > cursor:
            windows.append(TimeWindow(cursor, min(start, window.end)))
        cursor = max(cursor, end)
    if cursor < window.end:
        windows.append(TimeWindow(cursor, window.end))
    return windows


def session_break(tasks_done: int, preferences: UserPreferences) -> tuple[str, int]:
    """Short break after each task, long break every N sessions."""

    every = max(1, preferences.sessions_before_long_break)
    if tasks_done % every == 0:
        return "Long break", preferences.long_break_duration
    return "Short break", preferences.short_break_duration


@dataclass
class _FillState:
    items: list[ScheduleItem]
    tasks_done: int = 0
    last_task_end: Optional[datetime] = None
    break_due: bool = False


class Scheduler:
    """Build a daily schedule from tasks, preferences and learned habits."""

    def __init__(
        self,
        habits: Optional[HabitModel] = None,
        performance: Optional[PerformanceModel] = None,
        config: Optional[PlannerConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.habits = habits
        self.performance = performance
        self.config = config or PlannerConfig()
        self.clock = clock

    def boost_tasks(self, tasks: list[Task]) -> list[Task]:
        """Return copies with priority raised in the category's best period.

        Unestimated durations are replaced by the learned average when one exists.
        """

        if self.performance is None:
            return [replace(task) for task in tasks]

        hour = self.clock().hour
        boosted = []
        for task in tasks:
            adjusted = replace(task)
            if self.performance.best_period(task.category).contains(hour) and adjusted.priority < 5:
                adjusted.priority += 1
            if not adjusted.has_estimate and self.performance.has_duration(task.title):
                adjusted.estimated_duration = self.performance.average_duration(task.title)
            boosted.append(adjusted)
        return boosted

    def resolve_duration(self, task: Task) -> int:
        """Estimate, else learned duration, else the configured default."""

        if task.estimated_duration > 0:
            return task.estimated_duration

        default = self.config.scheduler.default_task_minutes
        predicted = 0
        if self.performance is not None and self.performance.has_duration(task.title):
            predicted = self.performance.average_duration(task.title)
        elif self.habits is not None:
            predicted = self.habits.predict_duration(task.title, task.category, default=default)
        return predicted if predicted > 0 else default

    def generate(
        self,
        target_date: date,
        tasks: list[Task],
        preferences: Optional[UserPreferences],
        busy: Iterable[tuple[datetime, datetime]] = (),
        break_policy: BreakPolicy = BreakPolicy.EVERY_NTH_ITEM,
    ) -> Schedule:
        """Greedily place relevant tasks into the day's free sub-windows."""

        if preferences is None:
            raise PreconditionError("User preferences are required to derive a work window")

        schedule = Schedule(date=target_date)
        relevant = filter_relevant_tasks(tasks, target_date, preferences, self.config.scheduler)
        if not relevant:
            logger.info("No relevant tasks for %s", target_date.isoformat())
            return schedule

        window = work_window(target_date, preferences)
        if window.end <= window.start:
            logger.warning("Empty work window for %s, nothing scheduled", target_date.isoformat())
            return schedule

        meals = meal_items(target_date, preferences, window)
        reserved = [(meal.start, meal.end) for meal in meals]
        for start, end in busy:
            if end <= start:
                logger.warning("Ignoring busy interval with non-positive length at %s", start)
                continue
            reserved.append((start, end))

        remaining = sort_by_priority(relevant)
        state = _FillState(items=[])
        pending_meals = sorted(meals, key=lambda item: item.start)

        for sub_window in build_windows(window, reserved):
            while pending_meals and pending_meals[0].end <= sub_window.start:
                state.items.append(pending_meals.pop(0))
            self._fill(sub_window, remaining, state, preferences, break_policy)
        state.items.extend(pending_meals)

        schedule.items = state.items
        schedule.sort_items()
        logger.info(
            "Scheduled %d/%d tasks for %s (%d task minutes)",
            state.tasks_done,
            len(relevant),
            target_date.isoformat(),
            schedule.task_minutes(),
        )
        return schedule

    def _productive_slot(self) -> Optional[tuple[int, int]]:
        if self.habits is None or not self.habits.has_productivity_data():
            return None
        return self.habits.most_productive_day(), self.habits.most_productive_hour()

    def _pick(self, remaining: list[Task], cursor: datetime, productive_slot: Optional[tuple[int, int]]) -> Task:
        if productive_slot == (cursor.weekday(), cursor.hour):
            return remaining[0]

        best = remaining[0]
        best_score = score_task(best, cursor, self.config.scoring)
        for task in remaining[1:]:
            score = score_task(task, cursor, self.config.scoring)
            if score > best_score:
                best, best_score = task, score
        return best

    def _fill(
        self,
        window: TimeWindow,
        remaining: list[Task],
        state: _FillState,
        preferences: UserPreferences,
        break_policy: BreakPolicy,
    ) -> None:
        cursor = window.start
        productive_slot = self._productive_slot()
        every_nth = self.config.scheduler.break_every_nth_item

        while cursor < window.end and remaining:
            if break_policy is BreakPolicy.SESSIONS and state.break_due and state.last_task_end == cursor:
                title, minutes = session_break(state.tasks_done, preferences)
                state.break_due = False
                if minutes > 0:
                    end = min(cursor + timedelta(minutes=minutes), window.end)
                    state.items.append(ScheduleItem(ItemKind.BREAK, title, cursor, end))
                    cursor = end
                continue

            task = self._pick(remaining, cursor, productive_slot)
            duration = self.resolve_duration(task)
            end = cursor + timedelta(minutes=duration)
            if end > window.end:
                logger.debug("Truncating '%s' to fit before %s", task.title, window.end.strftime("%H:%M"))
                end = window.end

            state.items.append(
                ScheduleItem(ItemKind.TASK, task.title, cursor, end, task_id=task.id, description=task.description)
            )
            remaining.remove(task)
            state.tasks_done += 1
            logger.debug("Placed '%s' at %s", task.title, cursor.strftime("%H:%M"))
            state.last_task_end = end
            cursor = end

            if not preferences.include_breaks or not remaining:
                continue
            if break_policy is BreakPolicy.SESSIONS:
                state.break_due = True
            elif len(state.items) % every_nth == 0:
                break_end = cursor + timedelta(minutes=preferences.break_duration)
                if preferences.break_duration > 0 and break_end <= window.end:
                    state.items.append(ScheduleItem(ItemKind.BREAK, "Break", cursor, break_end))
                    cursor = break_end
