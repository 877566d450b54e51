"""Planner front door owning the learned models and the scheduler."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from planner_engine.config import PlannerConfig
from planner_engine.context import ContextAdvisor
from planner_engine.errors import PreconditionError
from planner_engine.habits import HabitModel
from planner_engine.metrics import completion_score
from planner_engine.patterns import PatternRecognizer
from planner_engine.performance import PerformanceModel
from planner_engine.scheduling import BreakPolicy, Scheduler
from planner_engine.schema import Schedule, Task, UserActivity, UserPreferences
from planner_engine.stores import ActivityStore, PreferencesStore

logger = logging.getLogger(__name__)


class PlannerService:
    """Generate schedules and close the feedback loop from finished work.

    The habit, performance and pattern models live as long as the service and
    are shared by reference with the scheduler.
    """

    def __init__(
        self,
        config: Optional[PlannerConfig] = None,
        habits: Optional[HabitModel] = None,
        performance: Optional[PerformanceModel] = None,
        patterns: Optional[PatternRecognizer] = None,
        advisor: Optional[ContextAdvisor] = None,
        preferences_store: Optional[PreferencesStore] = None,
        activity_store: Optional[ActivityStore] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or PlannerConfig()
        self.habits = habits or HabitModel(self.config.habits)
        self.performance = performance or PerformanceModel(self.config.habits.default_duration)
        self.patterns = patterns or PatternRecognizer(self.config.patterns)
        self.advisor = advisor
        self.preferences_store = preferences_store
        self.activity_store = activity_store
        self.clock = clock
        self.scheduler = Scheduler(self.habits, self.performance, self.config, clock=clock)

    def _resolve_preferences(self, preferences: Optional[UserPreferences]) -> UserPreferences:
        if preferences is None and self.preferences_store is not None:
            preferences = self.preferences_store.get()
        if preferences is None:
            raise PreconditionError("Cannot generate a schedule without user preferences")
        return preferences

    def generate_schedule(
        self,
        day: date,
        tasks: list[Task],
        preferences: Optional[UserPreferences] = None,
    ) -> Schedule:
        """Boost, filter by context and schedule ``tasks`` for ``day``."""

        preferences = self._resolve_preferences(preferences)
        candidates = self.scheduler.boost_tasks(tasks)

        busy = []
        if self.advisor is not None:
            candidates, _ = self.advisor.defer_outdoor_tasks(candidates, day)
            busy = self.advisor.busy_intervals(day)

        schedule = self.scheduler.generate(day, candidates, preferences, busy=busy, break_policy=BreakPolicy.SESSIONS)
        warning = self.overload_warning(schedule)
        if warning:
            logger.warning(warning)
        return schedule

    def record_activity(self, activity: UserActivity) -> None:
        self.habits.record_activity(activity)
        if activity.completed:
            self.performance.record(
                activity.title,
                activity.category,
                activity.start,
                activity.duration_minutes,
                activity.productivity_score,
            )
        if self.activity_store is not None:
            self.activity_store.append(activity)

    def record_completion(self, task: Task, when: Optional[datetime] = None, productivity_score: float = 0.0) -> None:
        """Learn from a finished task.

        With a known actual duration the task also becomes an activity ending
        at ``when``, so its duration feeds the models.
        """

        finished = when or task.completion_date or self.clock()
        if task.actual_duration > 0:
            self.habits.record_completion(task.title, task.category)
            self.record_activity(
                UserActivity(
                    title=task.title,
                    category=task.category,
                    start=finished - timedelta(minutes=task.actual_duration),
                    end=finished,
                    productivity_score=productivity_score,
                    completed=True,
                    description=task.description,
                )
            )
        else:
            self.habits.record_completion(task.title, task.category, finished)

    def record_postponement(self, task: Task) -> None:
        self.habits.record_postponement(task.title)

    def analyze_history(self, activities: list[UserActivity]) -> None:
        """Rebuild all learned state from the full activity history."""

        self.habits.analyze(activities)
        self.performance.reset()
        for activity in activities:
            if activity.completed:
                self.performance.record(
                    activity.title,
                    activity.category,
                    activity.start,
                    activity.duration_minutes,
                    activity.productivity_score,
                )
        self.patterns.reset()
        self.patterns.analyze(activities)

    def predict_duration(self, title: str, category: str) -> int:
        if self.performance.has_duration(title):
            return self.performance.average_duration(title)
        return self.habits.predict_duration(title, category, default=self.config.scheduler.default_task_minutes)

    def overload_warning(self, schedule: Schedule) -> Optional[str]:
        if not schedule.is_overloaded():
            return None
        minutes = schedule.task_minutes()
        return (
            f"Your schedule for {schedule.date.isoformat()} holds {minutes // 60}h{minutes % 60:02d} of work. "
            "Consider moving some tasks to another day."
        )

    def apply_schedule(self, schedule: Schedule, tasks: list[Task]) -> list[Task]:
        """Return copies of the scheduled tasks with their scheduled date set.

        The caller persists the returned tasks; nothing is written here.
        """

        scheduled_ids = {item.task_id for item in schedule.task_items()}
        return [replace(task, scheduled_date=schedule.date) for task in tasks if task.id in scheduled_ids]

    def score_schedule(self, schedule: Schedule) -> float:
        schedule.set_productivity_score(completion_score(schedule))
        return schedule.productivity_score

    def productivity_tip(self) -> str:
        return self.habits.productivity_tip()

    def task_recommendation(self, title: str, category: str) -> str:
        return self.performance.recommendation(title, category)
