from datetime import date, datetime

from planner_engine.context import ContextAdvisor, SimulatedWeather, is_outdoor_task
from planner_engine.schema import CalendarEvent, Task, WeatherKind

DAY = date(2025, 3, 3)


class FixedWeather:
    def __init__(self, kind):
        self.kind = kind
        self.locations = []

    def forecast(self, day, location):
        self.locations.append(location)
        return self.kind


class FixedLocation:
    def current_location(self):
        return "Lyon"


class BrokenCalendar:
    def events(self, day):
        raise TimeoutError("calendar unreachable")


class ListCalendar:
    def __init__(self, events):
        self._events = events

    def events(self, day):
        return self._events


def test_simulated_weather_is_stable_per_day():
    weather = SimulatedWeather()
    assert weather.forecast(DAY) == weather.forecast(DAY)
    assert weather.forecast(date(2025, 7, 14)) in set(WeatherKind)


def test_outdoor_detection():
    assert is_outdoor_task(Task(1, "Morning jog"))
    assert is_outdoor_task(Task(2, "Team match", category="Sport"))
    assert not is_outdoor_task(Task(3, "Write report", category="Work"))


def test_snow_defers_outdoor_tasks_only():
    weather = FixedWeather(WeatherKind.SNOWY)
    advisor = ContextAdvisor(weather=weather, location=FixedLocation())
    kept, deferred = advisor.defer_outdoor_tasks([Task(1, "Hike"), Task(2, "Read")], DAY)
    assert [task.title for task in kept] == ["Read"]
    assert [task.title for task in deferred] == ["Hike"]
    assert weather.locations == ["Lyon"]


def test_good_weather_keeps_everything():
    advisor = ContextAdvisor(weather=FixedWeather(WeatherKind.SUNNY))
    kept, deferred = advisor.defer_outdoor_tasks([Task(1, "Hike")], DAY)
    assert [task.title for task in kept] == ["Hike"]
    assert deferred == []


def test_no_providers_means_no_constraints():
    advisor = ContextAdvisor()
    assert advisor.forecast(DAY) is None
    assert advisor.busy_intervals(DAY) == []
    assert advisor.current_location() is None


def test_busy_intervals_clip_and_skip_bad_events():
    events = [
        CalendarEvent("Late party", datetime(2025, 3, 3, 22), datetime(2025, 3, 4, 2)),
        CalendarEvent("Backwards", datetime(2025, 3, 3, 12), datetime(2025, 3, 3, 11)),
        CalendarEvent("Yesterday", datetime(2025, 3, 2, 9), datetime(2025, 3, 2, 10)),
    ]
    advisor = ContextAdvisor(calendar=ListCalendar(events))
    assert advisor.busy_intervals(DAY) == [(datetime(2025, 3, 3, 22), datetime(2025, 3, 4, 0))]


def test_calendar_failure_degrades_to_no_busy_time():
    assert ContextAdvisor(calendar=BrokenCalendar()).busy_intervals(DAY) == []
