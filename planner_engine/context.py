"""Advisory context from weather, calendar and location providers.

Every provider is optional and any failure degrades to "no constraint".
"""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, time, timedelta
from typing import Optional, Protocol

from planner_engine.schema import CalendarEvent, Task, WeatherKind

logger = logging.getLogger(__name__)

OUTDOOR_KEYWORDS = (
    "run",
    "jog",
    "walk",
    "hike",
    "bike",
    "cycling",
    "picnic",
    "garden",
    "outdoor",
    "park",
    "sport",
)
OUTDOOR_CATEGORIES = ("sport", "outdoor", "fitness")

_SEASONAL_WEATHER = {
    "winter": (WeatherKind.CLOUDY, WeatherKind.CLOUDY, WeatherKind.RAINY, WeatherKind.RAINY, WeatherKind.SNOWY, WeatherKind.SUNNY),
    "spring": (WeatherKind.SUNNY, WeatherKind.SUNNY, WeatherKind.CLOUDY, WeatherKind.CLOUDY, WeatherKind.RAINY),
    "summer": (WeatherKind.SUNNY, WeatherKind.SUNNY, WeatherKind.SUNNY, WeatherKind.CLOUDY, WeatherKind.RAINY),
    "autumn": (WeatherKind.CLOUDY, WeatherKind.CLOUDY, WeatherKind.RAINY, WeatherKind.RAINY, WeatherKind.SUNNY),
}


class WeatherProvider(Protocol):
    def forecast(self, day: date, location: Optional[str]) -> WeatherKind: ...


class CalendarProvider(Protocol):
    def events(self, day: date) -> list[CalendarEvent]: ...


class LocationProvider(Protocol):
    def current_location(self) -> str: ...


def _season(month: int) -> str:
    if month in (12, 1, 2):
        return "winter"
    if month in (3, 4, 5):
        return "spring"
    if month in (6, 7, 8):
        return "summer"
    return "autumn"


class SimulatedWeather:
    """Seasonal forecast that is stable for a given date."""

    def forecast(self, day: date, location: Optional[str] = None) -> WeatherKind:
        rng = random.Random(day.toordinal())
        return rng.choice(_SEASONAL_WEATHER[_season(day.month)])


def is_outdoor_task(task: Task) -> bool:
    title = task.title.lower()
    category = task.category.lower()
    return any(keyword in title for keyword in OUTDOOR_KEYWORDS) or any(
        keyword in category for keyword in OUTDOOR_CATEGORIES
    )


class ContextAdvisor:
    """Combine optional context providers into scheduling constraints."""

    def __init__(
        self,
        weather: Optional[WeatherProvider] = None,
        calendar: Optional[CalendarProvider] = None,
        location: Optional[LocationProvider] = None,
    ) -> None:
        self.weather = weather
        self.calendar = calendar
        self.location = location

    def current_location(self) -> Optional[str]:
        if self.location is None:
            return None
        try:
            return self.location.current_location()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Location provider failed, continuing without location: %s", exc)
            return None

    def forecast(self, day: date) -> Optional[WeatherKind]:
        if self.weather is None:
            return None
        try:
            return self.weather.forecast(day, self.current_location())
        except Exception as exc:  # noqa: BLE001
            logger.warning("Weather provider failed for %s, ignoring weather: %s", day.isoformat(), exc)
            return None

    def busy_intervals(self, day: date) -> list[tuple[datetime, datetime]]:
        """Calendar events on ``day`` as (start, end) pairs clipped to the day."""

        if self.calendar is None:
            return []
        try:
            events = list(self.calendar.events(day))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Calendar provider failed for %s, ignoring calendar: %s", day.isoformat(), exc)
            return []

        day_start = datetime.combine(day, time())
        day_end = day_start + timedelta(days=1)
        intervals = []
        for event in events:
            start, end = max(event.start, day_start), min(event.end, day_end)
            if end <= start:
                logger.warning("Skipping calendar event '%s' outside %s or with bad times", event.title, day.isoformat())
                continue
            intervals.append((start, end))
        return intervals

    def defer_outdoor_tasks(self, tasks: list[Task], day: date) -> tuple[list[Task], list[Task]]:
        """Split tasks into (kept, deferred); outdoor tasks wait out rain and snow."""

        forecast = self.forecast(day)
        if forecast not in (WeatherKind.RAINY, WeatherKind.SNOWY):
            return list(tasks), []

        kept, deferred = [], []
        for task in tasks:
            (deferred if is_outdoor_task(task) else kept).append(task)
        if deferred:
            logger.info("Deferring %d outdoor task(s) on %s (%s)", len(deferred), day.isoformat(), forecast.value)
        return kept, deferred
