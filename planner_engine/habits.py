"""Running habit statistics learned from observed activity."""

from __future__ import annotations

import logging
import threading
from collections import Counter, defaultdict
from datetime import datetime
from typing import Optional

import numpy as np

from planner_engine.config import HabitSettings
from planner_engine.schema import DAY_NAMES, UserActivity, majority

logger = logging.getLogger(__name__)


class _RunningMean:
    __slots__ = ("mean", "count")

    def __init__(self) -> None:
        self.mean = 0.0
        self.count = 0

    def add(self, value: float) -> None:
        self.mean = (self.mean * self.count + value) / (self.count + 1)
        self.count += 1


def _majority_bucket(counts: Counter) -> Optional[int]:
    winner = majority(counts)
    return winner[0] if winner else None


class HabitModel:
    """Productivity per hour and weekday, plus per-title duration and success counters.

    Every bucket is an unweighted incremental mean ``(old*count + new)/(count+1)``;
    hour and weekday buckets start at a neutral seed that the first observation
    replaces. All access is serialized through one lock per instance.
    """

    def __init__(self, settings: Optional[HabitSettings] = None) -> None:
        self.settings = settings or HabitSettings()
        self._lock = threading.RLock()
        self._completions: Counter = Counter()
        self._postponements: Counter = Counter()
        self._completion_hours: dict[str, Counter] = defaultdict(Counter)
        self._completion_days: dict[str, Counter] = defaultdict(Counter)
        self._reset_activity_state()

    def _reset_activity_state(self) -> None:
        self._hour_scores = np.full(24, self.settings.neutral_score, dtype=float)
        self._hour_counts = np.zeros(24, dtype=int)
        self._day_scores = np.full(7, self.settings.neutral_score, dtype=float)
        self._day_counts = np.zeros(7, dtype=int)
        self._category_scores: dict[str, _RunningMean] = defaultdict(_RunningMean)
        self._title_durations: dict[str, _RunningMean] = defaultdict(_RunningMean)
        self._category_durations: dict[str, _RunningMean] = defaultdict(_RunningMean)
        self._activity_hours: dict[str, Counter] = defaultdict(Counter)
        self._activity_days: dict[str, Counter] = defaultdict(Counter)
        self._activities: list[UserActivity] = []

    def record_activity(self, activity: UserActivity) -> None:
        """Fold one observed activity into the running statistics."""

        with self._lock:
            self._activities.append(activity)
            hour = activity.start.hour
            weekday = activity.start.weekday()

            score = float(activity.productivity_score)
            if score > 0:
                count = self._hour_counts[hour]
                self._hour_scores[hour] = (self._hour_scores[hour] * count + score) / (count + 1)
                self._hour_counts[hour] = count + 1

                count = self._day_counts[weekday]
                self._day_scores[weekday] = (self._day_scores[weekday] * count + score) / (count + 1)
                self._day_counts[weekday] = count + 1

                self._category_scores[activity.category].add(score)

            duration = activity.duration_minutes
            self._title_durations[activity.title].add(duration)
            self._category_durations[activity.category].add(duration)
            self._activity_hours[activity.title][hour] += 1
            self._activity_days[activity.title][weekday] += 1

    def record_completion(self, title: str, category: str = "", when: Optional[datetime] = None) -> None:
        with self._lock:
            self._completions[title] += 1
            if when is not None:
                self._completion_hours[title][when.hour] += 1
                self._completion_days[title][when.weekday()] += 1
        logger.debug("Recorded completion of '%s' (%s)", title, category or "uncategorized")

    def record_postponement(self, title: str) -> None:
        with self._lock:
            self._postponements[title] += 1

    def analyze(self, activities: list[UserActivity]) -> None:
        """Rebuild activity statistics from a full history.

        Completion and postponement counters are event-driven and survive the
        rebuild, so repeated calls with the same history give identical state.
        """

        with self._lock:
            self._reset_activity_state()
            for activity in sorted(activities, key=lambda a: (a.start, a.title)):
                self.record_activity(activity)
        logger.info("Habit model rebuilt from %d activities", len(activities))

    @property
    def activity_count(self) -> int:
        with self._lock:
            return len(self._activities)

    def has_productivity_data(self) -> bool:
        with self._lock:
            return bool(self._hour_counts.any())

    def hour_scores(self) -> np.ndarray:
        with self._lock:
            return self._hour_scores.copy()

    def day_scores(self) -> np.ndarray:
        with self._lock:
            return self._day_scores.copy()

    def category_score(self, category: str) -> Optional[float]:
        with self._lock:
            bucket = self._category_scores.get(category)
            return bucket.mean if bucket else None

    def most_productive_hour(self) -> int:
        """Hour with the highest mean score; the lowest hour wins ties."""

        with self._lock:
            return int(np.argmax(self._hour_scores))

    def most_productive_day(self) -> int:
        """Weekday (Monday=0) with the highest mean score; the lowest index wins ties."""

        with self._lock:
            return int(np.argmax(self._day_scores))

    def top_hours(self, n: int = 3) -> list[int]:
        with self._lock:
            order = np.argsort(-self._hour_scores, kind="stable")
        return [int(hour) for hour in order[:n]]

    def is_productive_hour(self, hour: int) -> bool:
        if not 0 <= hour < 24:
            return False
        with self._lock:
            return bool(self._hour_scores[hour] > self.settings.productive_threshold)

    def predict_duration(self, title: str, category: str, default: Optional[int] = None) -> int:
        """Title mean, else category mean, else the default duration."""

        with self._lock:
            by_title = self._title_durations.get(title)
            if by_title is not None and by_title.count:
                return int(round(by_title.mean))
            by_category = self._category_durations.get(category)
            if by_category is not None and by_category.count:
                return int(round(by_category.mean))
        return default if default is not None else self.settings.default_duration

    def has_duration(self, title: str) -> bool:
        with self._lock:
            bucket = self._title_durations.get(title)
            return bool(bucket and bucket.count)

    def task_success_rate(self, title: str) -> float:
        """Completions over completions plus postponements; -1.0 when unknown."""

        with self._lock:
            done = self._completions[title]
            postponed = self._postponements[title]
        total = done + postponed
        if total == 0:
            return -1.0
        return done / total

    def preferred_hour(self, title: str) -> Optional[int]:
        with self._lock:
            return _majority_bucket(self._activity_hours.get(title, Counter()) + self._completion_hours.get(title, Counter()))

    def preferred_day(self, title: str) -> Optional[int]:
        with self._lock:
            return _majority_bucket(self._activity_days.get(title, Counter()) + self._completion_days.get(title, Counter()))

    def productivity_tip(self) -> str:
        day = DAY_NAMES[self.most_productive_day()]
        hour = self.most_productive_hour()
        return f"You are most productive on {day} around {hour:02d}:00. Plan your important tasks then."
