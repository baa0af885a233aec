"""Daily completion toggle."""

from __future__ import annotations

from typing import Any

from timetable_tracker.core.errors import NotFoundError, ValidationError
from timetable_tracker.models import DAYS_PER_WEEK, DailyProgress, TimetableWeek
from timetable_tracker.services.completion_service import normalize_daily_status, recompute_rates


def validate_day_index(day_index: Any) -> int:
    if isinstance(day_index, bool) or not isinstance(day_index, int) or not 0 <= day_index < DAYS_PER_WEEK:
        raise ValidationError("Day index must be between 0 and 6", field="day_index")
    return day_index


def find_progress(week: TimetableWeek, activity_id: Any) -> DailyProgress:
    for progress in week.activities:
        if progress.id is not None and str(progress.id) == str(activity_id):
            return progress
    raise NotFoundError("Activity not found")


def toggle_daily_status(week: TimetableWeek, activity_id: Any, day_index: Any) -> DailyProgress:
    day = validate_day_index(day_index)
    progress = find_progress(week, activity_id)

    status = normalize_daily_status(progress.daily_status)
    status[day] = not status[day]
    progress.daily_status = status

    recompute_rates(week)
    return progress


__all__ = ["validate_day_index", "find_progress", "toggle_daily_status"]
