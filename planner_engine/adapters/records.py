"""Row coercion shared by the CSV and JSON adapters.

Bad optional fields fall back to safe defaults; rows missing a usable title
or timestamps are skipped by returning None.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Optional

from planner_engine.schema import Task, UserActivity

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "y"}


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _parse_datetime(value: Any) -> Optional[datetime]:
    raw = _text(value)
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def _parse_int(value: Any, default: int) -> int:
    raw = _text(value)
    if not raw:
        return default
    try:
        return int(float(raw))
    except (ValueError, OverflowError):
        return default


def _parse_float(value: Any, default: float) -> float:
    raw = _text(value)
    if not raw:
        return default
    try:
        parsed = float(raw)
    except ValueError:
        return default
    return parsed if math.isfinite(parsed) else default


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    raw = _text(value).lower()
    if not raw:
        return default
    return raw in _TRUE_VALUES


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def activity_from_row(row: dict, where: str) -> Optional[UserActivity]:
    title = _text(row.get("title"))
    start = _parse_datetime(row.get("start"))
    end = _parse_datetime(row.get("end"))
    if not title or start is None or end is None:
        logger.warning("%s: skipping activity without a title or valid start/end", where)
        return None
    if end < start:
        logger.warning("%s: activity '%s' ends before it starts, using zero duration", where, title)
        end = start

    score = _parse_float(row.get("productivity_score"), 0.0)
    if not 0.0 <= score <= 5.0:
        logger.warning("%s: productivity score %s out of range, clamping", where, score)
        score = max(0.0, min(5.0, score))

    return UserActivity(
        title=title,
        category=_text(row.get("category")),
        start=start,
        end=end,
        productivity_score=score,
        completed=_parse_bool(row.get("completed"), True),
        description=_text(row.get("description")),
    )


def task_from_row(row: dict, where: str, fallback_id: int) -> Optional[Task]:
    title = _text(row.get("title"))
    if not title:
        logger.warning("%s: skipping task without a title", where)
        return None

    due_raw = row.get("due_date")
    due_date = _parse_datetime(due_raw)
    if due_date is None and _text(due_raw):
        logger.warning("%s: malformed due date %r for '%s', ignoring it", where, due_raw, title)

    duration = _parse_int(row.get("estimated_duration"), 0)
    if duration <= 0:
        duration = 0

    return Task(
        id=_parse_int(row.get("id"), fallback_id),
        title=title,
        description=_text(row.get("description")),
        category=_text(row.get("category")),
        priority=_clamp(_parse_int(row.get("priority"), 3), 1, 5),
        difficulty=_clamp(_parse_int(row.get("difficulty"), 3), 1, 5),
        estimated_duration=duration,
        due_date=due_date,
        completed=_parse_bool(row.get("completed"), False),
    )
