import threading
from datetime import datetime

import pytest

from planner_engine.performance import PerformanceModel
from planner_engine.schema import DayPeriod


def test_unknown_category_defaults_to_morning():
    assert PerformanceModel().best_period("Music") is DayPeriod.MORNING


def test_best_period_follows_observed_scores():
    model = PerformanceModel()
    model.record("Run", "Sport", datetime(2025, 3, 3, 7), 30, 2.0)
    model.record("Run", "Sport", datetime(2025, 3, 3, 19), 30, 4.5)
    model.record("Run", "Sport", datetime(2025, 3, 4, 19), 30, 3.5)
    assert model.period_scores("Sport") == {DayPeriod.MORNING: 2.0, DayPeriod.EVENING: 4.0}
    assert model.best_period("Sport") is DayPeriod.EVENING


def test_zero_score_records_duration_only():
    model = PerformanceModel()
    model.record("Filing", "Admin", datetime(2025, 3, 3, 15), 25, 0.0)
    assert model.period_scores("Admin") == {}
    assert model.best_period("Admin") is DayPeriod.MORNING
    assert model.has_duration("Filing")
    assert model.average_duration("Filing") == 25


def test_average_duration_rounds_and_defaults():
    model = PerformanceModel(default_duration=50)
    model.record("Report", "Work", datetime(2025, 3, 3, 9), 40, 3.0)
    model.record("Report", "Work", datetime(2025, 3, 4, 9), 45, 3.0)
    assert model.average_duration("Report") == 42
    assert model.average_duration("Other") == 50
    assert model.average_duration("Other", default=10) == 10


def test_reset_clears_everything():
    model = PerformanceModel()
    model.record("Report", "Work", datetime(2025, 3, 3, 14), 40, 3.0)
    model.reset()
    assert not model.has_duration("Report")
    assert model.period_scores("Work") == {}


def test_recommendation_mentions_period_and_duration():
    model = PerformanceModel()
    model.record("Report", "Work", datetime(2025, 3, 3, 14), 40, 3.0)
    text = model.recommendation("Report", "Work")
    assert "in the afternoon" in text
    assert "40 minutes" in text


def test_concurrent_records_are_not_lost():
    observations = [("Report", "Work", datetime(2025, 3, 3, 9 + i % 10), 20 + i % 9, 1.0 + i % 5) for i in range(400)]
    sequential = PerformanceModel()
    for observation in observations:
        sequential.record(*observation)

    shared = PerformanceModel()
    chunks = [observations[i::8] for i in range(8)]
    threads = [threading.Thread(target=lambda chunk=chunk: [shared.record(*o) for o in chunk]) for chunk in chunks]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert shared.average_duration("Report") == sequential.average_duration("Report")
    shared_scores = shared.period_scores("Work")
    assert shared_scores.keys() == sequential.period_scores("Work").keys()
    for period, mean in sequential.period_scores("Work").items():
        assert shared_scores[period] == pytest.approx(mean)
