"""Planner configuration loaded from YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class ScoringWeights(BaseModel):
    """Weights of the greedy placement score: priority*w - difficulty*w + due bonus."""

    model_config = ConfigDict(extra="forbid")
    priority_weight: int = Field(default=2, ge=0)
    difficulty_weight: int = Field(default=1, ge=0)
    due_within_1_day_bonus: int = Field(default=5, ge=0)
    due_within_3_days_bonus: int = Field(default=3, ge=0)
    due_within_7_days_bonus: int = Field(default=1, ge=0)


class SchedulerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    default_task_minutes: int = Field(default=60, ge=1)
    break_every_nth_item: int = Field(default=3, ge=1)
    urgent_priority: int = Field(default=4, ge=1, le=5)
    near_due_priority: int = Field(default=3, ge=1, le=5)
    near_due_days: int = Field(default=3, ge=0)


class HabitSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    neutral_score: float = Field(default=0.5, ge=0.0, le=5.0)
    productive_threshold: float = Field(default=0.6, ge=0.0, le=5.0)
    default_duration: int = Field(default=60, ge=1)


class PatternSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    min_occurrences: int = Field(default=3, ge=1)
    min_share: float = Field(default=0.5, gt=0.0, le=1.0)
    default_hour: int = Field(default=9, ge=0, le=23)


class PlannerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    scoring: ScoringWeights = Field(default_factory=ScoringWeights)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    habits: HabitSettings = Field(default_factory=HabitSettings)
    patterns: PatternSettings = Field(default_factory=PatternSettings)


def load_config(path: Optional[Union[str, Path]] = None) -> PlannerConfig:
    """Load a PlannerConfig from a YAML file, falling back to defaults."""

    if path is None:
        return PlannerConfig()

    config_path = Path(path)
    if not config_path.exists():
        logger.warning("Config file %s not found, using defaults", config_path)
        return PlannerConfig()

    with open(config_path, encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}

    if not isinstance(payload, dict):
        raise ValueError(f"{config_path}: configuration must be a mapping")

    return PlannerConfig.model_validate(payload)
