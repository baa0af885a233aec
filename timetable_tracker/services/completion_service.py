"""Completion-rate math for week snapshots."""

from __future__ import annotations

from typing import Iterable, List

from timetable_tracker.models import DAYS_PER_WEEK, DailyProgress, Timetable, TimetableWeek


def normalize_daily_status(values: Iterable | None) -> List[bool]:
    """Coerce a stored status vector to exactly seven booleans.

    Legacy rows with a short or long vector are padded with ``False`` or
    truncated instead of failing the read.
    """
    status = [bool(value) for value in list(values or [])[:DAYS_PER_WEEK]]
    status.extend([False] * (DAYS_PER_WEEK - len(status)))
    return status


def activity_completion_rate(daily_status: List[bool]) -> float:
    return round(100 * sum(1 for done in daily_status if done) / DAYS_PER_WEEK, 1)


def repair_progress(progress: DailyProgress) -> bool:
    # 日本語: JSON 列の変更検知のため新しいリストを代入する / English: Reassign a new list so the JSON column is flagged dirty
    normalized = normalize_daily_status(progress.daily_status)
    if normalized != progress.daily_status:
        progress.daily_status = normalized
        return True
    return False


def recompute_rates(week: TimetableWeek) -> TimetableWeek:
    total_possible = len(week.activities) * DAYS_PER_WEEK
    total_completed = 0

    for progress in week.activities:
        repair_progress(progress)
        completed = sum(1 for done in progress.daily_status if done)
        progress.completion_rate = activity_completion_rate(progress.daily_status)
        total_completed += completed

    week.overall_completion_rate = (
        100 * total_completed / total_possible if total_possible > 0 else 0.0
    )
    return week


def recompute_timetable_rates(timetable: Timetable) -> None:
    """Refresh derived rates on every week before a save."""
    for week in timetable.weeks:
        recompute_rates(week)


__all__ = [
    "normalize_daily_status",
    "activity_completion_rate",
    "repair_progress",
    "recompute_rates",
    "recompute_timetable_rates",
]
