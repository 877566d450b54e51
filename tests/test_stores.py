from datetime import datetime

import pytest

from planner_engine.schema import Task, UserActivity, UserPreferences
from planner_engine.stores import InMemoryActivityStore, InMemoryPreferencesStore, InMemoryTaskStore


def test_task_store_returns_copies():
    store = InMemoryTaskStore([Task(1, "A", priority=2), Task(2, "B", completed=True)])
    task = store.get(1)
    task.priority = 5
    assert store.get(1).priority == 2

    store.update(task)
    assert store.get(1).priority == 5
    assert [t.id for t in store.list(lambda t: not t.completed)] == [1]


def test_task_store_unknown_id():
    with pytest.raises(KeyError):
        InMemoryTaskStore().get(42)


def test_preferences_store():
    assert InMemoryPreferencesStore().get() is None
    preferences = UserPreferences(include_breaks=False)
    assert InMemoryPreferencesStore(preferences).get() is preferences


def test_activity_store_is_append_only():
    store = InMemoryActivityStore()
    first = UserActivity("Yoga", "Health", datetime(2025, 3, 3, 7), datetime(2025, 3, 3, 7, 45))
    store.append(first)
    store.append(UserActivity("Read", "Personal", datetime(2025, 3, 3, 21), datetime(2025, 3, 3, 22)))

    snapshot = store.list_all()
    snapshot.clear()
    assert len(store.list_all()) == 2
    assert store.list_by_title("Yoga") == [first]
