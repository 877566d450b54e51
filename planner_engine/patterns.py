"""Recurring-task pattern recognition."""

from __future__ import annotations

import calendar
import logging
import threading
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Callable, Optional

from planner_engine.config import PatternSettings
from planner_engine.schema import DAY_NAMES, PatternKind, TaskPattern, UserActivity, majority

logger = logging.getLogger(__name__)

# Preference order when confidences tie.
_KIND_ORDER = {PatternKind.DAILY: 0, PatternKind.WEEKLY: 1, PatternKind.MONTHLY: 2}


def _at_hour(moment: datetime, hour: int) -> datetime:
    return moment.replace(hour=hour, minute=0, second=0, microsecond=0)


def _clamped_day(year: int, month: int, day: int) -> int:
    return min(day, calendar.monthrange(year, month)[1])


class PatternRecognizer:
    """Detect daily, weekly and monthly recurrence by majority vote."""

    def __init__(self, settings: Optional[PatternSettings] = None) -> None:
        self.settings = settings or PatternSettings()
        self._lock = threading.RLock()
        self._patterns: dict[str, list[TaskPattern]] = {}

    def analyze(self, history: list[UserActivity]) -> dict[str, list[TaskPattern]]:
        """Regenerate patterns for every title in ``history`` with enough occurrences."""

        by_title: dict[str, list[UserActivity]] = defaultdict(list)
        for activity in history:
            by_title[activity.title].append(activity)

        found: dict[str, list[TaskPattern]] = {}
        for title, activities in by_title.items():
            if len(activities) < self.settings.min_occurrences:
                continue
            patterns = self._identify(title, activities)
            if patterns:
                found[title] = patterns
                logger.debug("Found %d pattern(s) for '%s'", len(patterns), title)

        with self._lock:
            for title in by_title:
                self._patterns.pop(title, None)
            self._patterns.update(found)

        logger.info("Analyzed %d titles, %d with recurring patterns", len(by_title), len(found))
        return found

    def _identify(self, title: str, activities: list[UserActivity]) -> list[TaskPattern]:
        total = len(activities)
        hour, _ = majority(Counter(a.start.hour for a in activities))

        extractors: list[tuple[PatternKind, Callable[[datetime], int], str]] = [
            (PatternKind.DAILY, lambda moment: moment.hour, "hour_of_day"),
            (PatternKind.WEEKLY, lambda moment: moment.weekday(), "day_of_week"),
            (PatternKind.MONTHLY, lambda moment: moment.day, "day_of_month"),
        ]

        patterns = []
        for kind, extract, attribute in extractors:
            bucket, count = majority(Counter(extract(a.start) for a in activities))
            if count < total * self.settings.min_share:
                continue
            pattern = TaskPattern(title=title, kind=kind, confidence=count / total, hour_of_day=hour)
            setattr(pattern, attribute, bucket)
            patterns.append(pattern)
        return patterns

    def reset(self) -> None:
        with self._lock:
            self._patterns.clear()

    def titles(self) -> list[str]:
        with self._lock:
            return sorted(self._patterns)

    def patterns(self, title: str) -> list[TaskPattern]:
        with self._lock:
            return list(self._patterns.get(title, []))

    def has_recurring_pattern(self, title: str) -> bool:
        with self._lock:
            return bool(self._patterns.get(title))

    def best_pattern(self, title: str) -> Optional[TaskPattern]:
        candidates = self.patterns(title)
        if not candidates:
            return None
        return min(candidates, key=lambda p: (-p.confidence, _KIND_ORDER[p.kind]))

    def predict_next_occurrence(self, title: str, reference: datetime) -> Optional[datetime]:
        """Next moment strictly after ``reference`` matching the best pattern."""

        pattern = self.best_pattern(title)
        if pattern is None:
            logger.debug("No pattern for '%s'", title)
            return None

        hour = pattern.hour_of_day if pattern.hour_of_day is not None else self.settings.default_hour

        if pattern.kind is PatternKind.DAILY:
            candidate = _at_hour(reference, hour)
            if candidate <= reference:
                candidate += timedelta(days=1)
            return candidate

        if pattern.kind is PatternKind.WEEKLY:
            days_ahead = (pattern.day_of_week - reference.weekday()) % 7 or 7
            return _at_hour(reference + timedelta(days=days_ahead), hour)

        if pattern.kind is PatternKind.MONTHLY:
            year, month = reference.year, reference.month
            candidate = _at_hour(reference.replace(day=_clamped_day(year, month, pattern.day_of_month)), hour)
            if candidate <= reference:
                year, month = (year + 1, 1) if month == 12 else (year, month + 1)
                candidate = _at_hour(
                    reference.replace(year=year, month=month, day=_clamped_day(year, month, pattern.day_of_month)),
                    hour,
                )
            return candidate

        raise ValueError(f"Unsupported pattern kind {pattern.kind}")

    def pattern_description(self, title: str) -> Optional[str]:
        pattern = self.best_pattern(title)
        if pattern is None:
            return None
        if pattern.kind is PatternKind.DAILY:
            return f"Every day at {pattern.hour_of_day:02d}:00"
        if pattern.kind is PatternKind.WEEKLY:
            return f"Every {DAY_NAMES[pattern.day_of_week]}"
        return f"On day {pattern.day_of_month} of every month"
