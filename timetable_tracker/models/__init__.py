"""SQLModel exports for Timetable Tracker."""

from .timetable_models import (
    DAYS_PER_WEEK,
    Activity,
    CatalogActivity,
    DailyProgress,
    Timetable,
    TimetableWeek,
    empty_daily_status,
)

__all__ = [
    "DAYS_PER_WEEK",
    "Activity",
    "Timetable",
    "CatalogActivity",
    "TimetableWeek",
    "DailyProgress",
    "empty_daily_status",
]
