import pytest
from pydantic import ValidationError

from planner_engine.config import PlannerConfig, load_config


def test_defaults_without_path():
    config = load_config()
    assert config.scoring.priority_weight == 2
    assert config.scheduler.break_every_nth_item == 3
    assert config.habits.neutral_score == 0.5
    assert config.patterns.min_occurrences == 3


def test_missing_file_falls_back_to_defaults(tmp_path):
    assert load_config(tmp_path / "missing.yaml") == PlannerConfig()


def test_yaml_overrides(tmp_path):
    path = tmp_path / "planner.yaml"
    path.write_text("scheduler:\n  default_task_minutes: 45\nscoring:\n  due_within_1_day_bonus: 8\n", encoding="utf-8")
    config = load_config(path)
    assert config.scheduler.default_task_minutes == 45
    assert config.scoring.due_within_1_day_bonus == 8
    assert config.scoring.priority_weight == 2


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "planner.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == PlannerConfig()


def test_non_mapping_payload_rejected(tmp_path):
    path = tmp_path / "planner.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "planner.yaml"
    path.write_text("scheduler:\n  warp_speed: 9\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(path)
