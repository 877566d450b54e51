"""Per-category performance by day-period."""

from __future__ import annotations

import threading
from collections import defaultdict
from datetime import datetime
from typing import Optional

import numpy as np

from planner_engine.schema import DayPeriod

_PERIODS = tuple(DayPeriod)

_PERIOD_PHRASES = {
    DayPeriod.MORNING: "in the morning",
    DayPeriod.AFTERNOON: "in the afternoon",
    DayPeriod.EVENING: "in the evening",
    DayPeriod.NIGHT: "at night",
}


class PerformanceModel:
    """Running mean productivity per (category, day-period) and mean duration per title."""

    def __init__(self, default_duration: int = 60) -> None:
        self.default_duration = default_duration
        self._lock = threading.RLock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._scores: dict[str, np.ndarray] = defaultdict(lambda: np.zeros(len(_PERIODS), dtype=float))
            self._counts: dict[str, np.ndarray] = defaultdict(lambda: np.zeros(len(_PERIODS), dtype=int))
            self._duration_totals: dict[str, int] = defaultdict(int)
            self._duration_counts: dict[str, int] = defaultdict(int)

    def record(self, title: str, category: str, start: datetime, duration_minutes: int, score: float) -> None:
        """Add one observation; zero scores carry no productivity information."""

        period = DayPeriod.of_hour(start.hour).value
        with self._lock:
            if score > 0:
                scores = self._scores[category]
                counts = self._counts[category]
                scores[period] = (scores[period] * counts[period] + score) / (counts[period] + 1)
                counts[period] += 1
            if duration_minutes > 0:
                self._duration_totals[title] += int(duration_minutes)
                self._duration_counts[title] += 1

    def period_scores(self, category: str) -> dict[DayPeriod, float]:
        with self._lock:
            if category not in self._counts:
                return {}
            counts = self._counts[category]
            scores = self._scores[category]
            return {period: float(scores[period.value]) for period in _PERIODS if counts[period.value]}

    def best_period(self, category: str) -> DayPeriod:
        """Period with the highest mean score; morning when the category is unknown."""

        with self._lock:
            if category not in self._counts:
                return DayPeriod.MORNING
            observed = np.where(self._counts[category] > 0, self._scores[category], -np.inf)
        return _PERIODS[int(np.argmax(observed))]

    def has_duration(self, title: str) -> bool:
        with self._lock:
            return self._duration_counts.get(title, 0) > 0

    def average_duration(self, title: str, default: Optional[int] = None) -> int:
        with self._lock:
            count = self._duration_counts.get(title, 0)
            if count:
                return int(round(self._duration_totals[title] / count))
        return self.default_duration if default is None else default

    def recommendation(self, title: str, category: str) -> str:
        phrase = _PERIOD_PHRASES[self.best_period(category)]
        minutes = self.average_duration(title)
        return (
            f"You work best on '{category}' tasks {phrase}. "
            f"'{title}' usually takes you {minutes} minutes, so plan it {phrase}."
        )
