"""Activity catalog validation and reconciliation."""

from __future__ import annotations

import logging
import re
from typing import Any, List, Sequence, Tuple

from timetable_tracker.core.errors import ValidationError
from timetable_tracker.models import Activity, CatalogActivity, DailyProgress, Timetable
from timetable_tracker.services.completion_service import recompute_rates

logger = logging.getLogger(__name__)

TIME_RANGE_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)-([01]\d|2[0-3]):([0-5]\d)$")
MINUTES_PER_DAY = 24 * 60

DEFAULT_ACTIVITIES: Tuple[Activity, ...] = (
    Activity(name="DS & Algo", time="18:00-00:00", category="Core"),
    Activity(name="MERN Stack", time="00:00-05:00", category="Frontend"),
    Activity(name="Go Backend", time="10:00-12:00", category="Backend"),
    Activity(name="Java & Spring", time="12:00-14:00", category="Backend"),
    Activity(name="Mobile Development", time="14:00-17:00", category="Mobile"),
)


def parse_time_range(value: str) -> Tuple[int, int]:
    """Return (start, end) minutes after midnight for ``HH:MM-HH:MM``."""
    match = TIME_RANGE_PATTERN.match(value or "")
    if not match:
        raise ValidationError(f"Invalid time range '{value}'. Expected HH:MM-HH:MM", field="time")
    start_hour, start_minute, end_hour, end_minute = (int(part) for part in match.groups())
    return start_hour * 60 + start_minute, end_hour * 60 + end_minute


def duration_minutes(value: str) -> int:
    # 日本語: 終了が開始より前なら日付を跨ぐ / English: End before start wraps past midnight
    start, end = parse_time_range(value)
    if end < start:
        end += MINUTES_PER_DAY
    return end - start


def validate_activities(payload: Any) -> List[Activity]:
    if not isinstance(payload, list):
        raise ValidationError("Invalid input: activities must be an array", field="activities")

    activities = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict):
            raise ValidationError(f"activities[{index}] must be an object", field="activities")
        values = {}
        for key in ("name", "time", "category"):
            value = raw.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(
                    "Each activity must have name, time, and category "
                    f"(activities[{index}].{key} is missing)",
                    field=key,
                )
            values[key] = value.strip()
        try:
            parse_time_range(values["time"])
        except ValidationError as exc:
            raise ValidationError(f"activities[{index}].time: {exc.message}", field="time") from exc
        activities.append(Activity(**values))
    return activities


def apply_catalog_edit(timetable: Timetable, activities: Sequence[Activity]) -> None:
    """Replace the catalog and carry completion state over to unchanged activities.

    Matching is exact on (name, time, category); an activity with any field
    edited starts again from an empty week.
    """
    # 日本語: 一括代入は等価比較で別の行を外すため、その場で入れ替える / English: Replace in place; bulk assignment removes rows by value equality
    timetable.default_activities.clear()
    timetable.default_activities.extend(
        CatalogActivity.from_activity(activity, position=index) for index, activity in enumerate(activities)
    )

    week = timetable.current_week
    if week is None:
        return

    previous = list(week.activities)
    reused = set()
    rebuilt = []
    preserved = 0
    for index, activity in enumerate(activities):
        match = next((progress for progress in previous if progress.activity == activity), None)
        if match is None:
            rebuilt.append(DailyProgress.from_activity(activity, position=index))
            continue

        preserved += 1
        if id(match) in reused:
            # 日本語: 重複エントリは状態をコピーした新規行にする / English: Duplicate entries get a fresh row with a copied status
            rebuilt.append(
                DailyProgress.from_activity(
                    activity,
                    position=index,
                    daily_status=match.daily_status,
                    completion_rate=match.completion_rate,
                )
            )
            continue

        reused.add(id(match))
        match.position = index
        rebuilt.append(match)

    week.activities.clear()
    week.activities.extend(rebuilt)
    recompute_rates(week)
    logger.info(
        "Catalog of timetable %s replaced: %d activities, %d carried over",
        timetable.id,
        len(activities),
        preserved,
    )


__all__ = [
    "DEFAULT_ACTIVITIES",
    "TIME_RANGE_PATTERN",
    "parse_time_range",
    "duration_minutes",
    "validate_activities",
    "apply_catalog_edit",
]
