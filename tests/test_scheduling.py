from datetime import date, datetime, timedelta

import pytest

from planner_engine.errors import PreconditionError
from planner_engine.habits import HabitModel
from planner_engine.performance import PerformanceModel
from planner_engine.scheduling import (
    BreakPolicy,
    Scheduler,
    TimeWindow,
    build_windows,
    filter_relevant_tasks,
    score_task,
)
from planner_engine.schema import ItemKind, Task, UserActivity, UserPreferences
from planner_engine.simulation import generate_demo_tasks

MONDAY = date(2025, 3, 3)
SATURDAY = date(2025, 3, 8)


def at(hour, minute=0, day=MONDAY):
    return datetime(day.year, day.month, day.day, hour, minute)


def plain_preferences(**overrides):
    values = dict(include_breakfast=False, include_lunch=False, include_dinner=False, include_breaks=False)
    values.update(overrides)
    return UserPreferences(**values)


def spans(schedule):
    return [(item.title, item.start.strftime("%H:%M"), item.end.strftime("%H:%M")) for item in schedule.items]


def test_priority_descending_fill():
    tasks = [
        Task(1, "Write report", priority=5, estimated_duration=60),
        Task(2, "Email", priority=2, estimated_duration=30, due_date=at(18)),
    ]
    schedule = Scheduler().generate(MONDAY, tasks, plain_preferences())
    assert spans(schedule) == [("Write report", "09:00", "10:00"), ("Email", "10:00", "10:30")]


def test_break_after_every_third_item():
    tasks = [Task(i, f"Task {i}", priority=5 if i < 3 else 4, estimated_duration=30) for i in range(1, 5)]
    schedule = Scheduler().generate(MONDAY, tasks, plain_preferences(include_breaks=True))
    assert spans(schedule) == [
        ("Task 1", "09:00", "09:30"),
        ("Task 2", "09:30", "10:00"),
        ("Task 3", "10:00", "10:30"),
        ("Break", "10:30", "10:45"),
        ("Task 4", "10:45", "11:15"),
    ]


def test_session_breaks_alternate_short_and_long():
    tasks = [Task(i, f"Task {i}", priority=5, estimated_duration=30) for i in range(1, 4)]
    preferences = plain_preferences(include_breaks=True, sessions_before_long_break=2, long_break_duration=15)
    schedule = Scheduler().generate(MONDAY, tasks, preferences, break_policy=BreakPolicy.SESSIONS)
    assert spans(schedule) == [
        ("Task 1", "09:00", "09:30"),
        ("Short break", "09:30", "09:35"),
        ("Task 2", "09:35", "10:05"),
        ("Long break", "10:05", "10:20"),
        ("Task 3", "10:20", "10:50"),
    ]


def test_missing_preferences_raise():
    with pytest.raises(PreconditionError):
        Scheduler().generate(MONDAY, [Task(1, "Write report", priority=5)], None)


def test_items_sorted_disjoint_and_inside_window():
    tasks = generate_demo_tasks(MONDAY, inclusion_rate=1.0)
    preferences = UserPreferences()
    schedule = Scheduler().generate(MONDAY, tasks, preferences)

    assert schedule.items
    for previous, current in zip(schedule.items, schedule.items[1:]):
        assert previous.end <= current.start
    assert schedule.items[0].start >= at(9)
    assert schedule.items[-1].end <= at(17)
    assert [item.title for item in schedule.items if item.kind is ItemKind.MEAL] == ["Lunch"]
    assert len({item.task_id for item in schedule.task_items()}) == len(schedule.task_items())


def test_lunch_is_reserved():
    tasks = [Task(i, f"Task {i}", priority=5, estimated_duration=60) for i in range(1, 6)]
    schedule = Scheduler().generate(MONDAY, tasks, plain_preferences(include_lunch=True))
    assert ("Lunch", "12:30", "13:30") in spans(schedule)
    assert ("Task 4", "12:00", "12:30") in spans(schedule)
    assert ("Task 5", "13:30", "14:30") in spans(schedule)


def test_overflowing_task_is_truncated():
    preferences = plain_preferences()
    preferences.set_work_hours(MONDAY.weekday(), 9, 10)
    schedule = Scheduler().generate(MONDAY, [Task(1, "Marathon", priority=5, estimated_duration=120)], preferences)
    assert spans(schedule) == [("Marathon", "09:00", "10:00")]


def test_busy_intervals_are_skipped():
    tasks = [Task(1, "A", priority=5, estimated_duration=60), Task(2, "B", priority=5, estimated_duration=60)]
    schedule = Scheduler().generate(MONDAY, tasks, plain_preferences(), busy=[(at(10), at(11))])
    assert spans(schedule) == [("A", "09:00", "10:00"), ("B", "11:00", "12:00")]


def test_overloaded_day():
    preferences = plain_preferences()
    preferences.set_work_hours(MONDAY.weekday(), 8, 18)
    tasks = [Task(i, f"Task {i}", priority=5, estimated_duration=180) for i in range(1, 4)]
    schedule = Scheduler().generate(MONDAY, tasks, preferences)
    assert schedule.task_minutes() == 540
    assert schedule.is_overloaded()


def test_empty_work_window_gives_empty_schedule():
    preferences = plain_preferences()
    preferences.set_work_hours(MONDAY.weekday(), 12, 12)
    schedule = Scheduler().generate(MONDAY, [Task(1, "A", priority=5)], preferences)
    assert schedule.items == []


def test_relevance_filter_on_work_day():
    tasks = [
        Task(1, "Due today", priority=1, due_date=at(17)),
        Task(2, "Urgent", priority=4),
        Task(3, "Soon", priority=3, due_date=at(12, day=MONDAY + timedelta(days=2))),
        Task(4, "Later", priority=3, due_date=at(12, day=MONDAY + timedelta(days=5))),
        Task(5, "Someday", priority=2),
        Task(6, "Done", priority=5, completed=True),
    ]
    kept = filter_relevant_tasks(tasks, MONDAY, UserPreferences())
    assert [task.id for task in kept] == [1, 2, 3]


def test_relevance_filter_on_rest_day():
    tasks = [Task(1, "Due today", priority=3, due_date=at(17, day=SATURDAY)), Task(2, "Urgent", priority=4)]
    assert [task.id for task in filter_relevant_tasks(tasks, SATURDAY, UserPreferences())] == [2]


def test_score_task_due_bonuses():
    now = at(9)
    assert score_task(Task(1, "Undated", priority=4, difficulty=2), now) == 6
    assert score_task(Task(2, "Tomorrow", priority=4, difficulty=2, due_date=now + timedelta(hours=30)), now) == 11
    assert score_task(Task(3, "Soon", priority=4, difficulty=2, due_date=now + timedelta(days=3)), now) == 9
    assert score_task(Task(4, "Week", priority=4, difficulty=2, due_date=now + timedelta(days=6)), now) == 7
    assert score_task(Task(5, "Far", priority=4, difficulty=2, due_date=now + timedelta(days=10)), now) == 6


def test_build_windows_around_reservations():
    windows = build_windows(TimeWindow(at(9), at(17)), [(at(12, 30), at(13, 30)), (at(8), at(9, 30))])
    assert windows == [TimeWindow(at(9, 30), at(12, 30)), TimeWindow(at(13, 30), at(17))]


def test_highest_score_wins_outside_productive_slot():
    tasks = [
        Task(1, "Hard", priority=5, difficulty=5, estimated_duration=30),
        Task(2, "Due now", priority=4, difficulty=1, estimated_duration=30, due_date=at(17)),
    ]
    schedule = Scheduler().generate(MONDAY, tasks, plain_preferences())
    assert [item.title for item in schedule.items] == ["Due now", "Hard"]


def test_productive_slot_takes_highest_priority_task():
    habits = HabitModel()
    start = datetime(2025, 2, 24, 9)
    habits.record_activity(UserActivity("Deep work", "Work", start, start + timedelta(hours=1), productivity_score=5.0))
    tasks = [
        Task(1, "Hard", priority=5, difficulty=5, estimated_duration=30),
        Task(2, "Due now", priority=4, difficulty=1, estimated_duration=30, due_date=at(17)),
    ]
    schedule = Scheduler(habits=habits).generate(MONDAY, tasks, plain_preferences())
    assert [item.title for item in schedule.items] == ["Hard", "Due now"]


def test_resolve_duration_sources():
    performance = PerformanceModel()
    performance.record("Report", "Work", at(9), 50, 3.0)
    habits = HabitModel()
    habits.record_activity(UserActivity("Standup", "Work", at(9), at(9, 20)))
    scheduler = Scheduler(habits=habits, performance=performance)

    assert scheduler.resolve_duration(Task(1, "Report", estimated_duration=35)) == 35
    assert scheduler.resolve_duration(Task(2, "Report", category="Work")) == 50
    assert scheduler.resolve_duration(Task(3, "Standup", category="Work")) == 20
    assert Scheduler().resolve_duration(Task(4, "Unknown")) == 60


def test_boost_tasks_in_best_period():
    performance = PerformanceModel()
    performance.record("Report", "Work", at(10), 45, 4.0)
    original = [Task(1, "Report", category="Work", priority=3), Task(2, "Max", category="Work", priority=5)]

    morning = Scheduler(performance=performance, clock=lambda: at(10)).boost_tasks(original)
    assert [task.priority for task in morning] == [4, 5]
    assert morning[0].estimated_duration == 45
    assert original[0].priority == 3
    assert original[0].estimated_duration == 0

    evening = Scheduler(performance=performance, clock=lambda: at(20)).boost_tasks(original)
    assert [task.priority for task in evening] == [3, 5]


def test_session_policy_respects_disabled_breaks():
    tasks = [Task(i, f"Task {i}", priority=5, estimated_duration=30) for i in range(1, 4)]
    schedule = Scheduler().generate(MONDAY, tasks, plain_preferences(), break_policy=BreakPolicy.SESSIONS)
    assert [item.kind for item in schedule.items] == [ItemKind.TASK] * 3
    assert spans(schedule)[-1] == ("Task 3", "10:00", "10:30")
