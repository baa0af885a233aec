"""Week boundaries and the rollover engine."""

from __future__ import annotations

import datetime
import logging
from typing import Tuple

from dateutil.relativedelta import MO, relativedelta

from timetable_tracker.models import DailyProgress, Timetable, TimetableWeek
from timetable_tracker.services.completion_service import recompute_rates

logger = logging.getLogger(__name__)


def week_bounds(now: datetime.datetime) -> Tuple[datetime.datetime, datetime.datetime]:
    """Monday 00:00:00.000 and Sunday 23:59:59.999 of the week containing ``now``."""
    # 日本語: 日曜日は6日前の月曜から始まる週に属する / English: Sunday belongs to the week starting six days earlier
    monday = (now + relativedelta(weekday=MO(-1))).replace(hour=0, minute=0, second=0, microsecond=0)
    sunday = (monday + relativedelta(days=6)).replace(hour=23, minute=59, second=59, microsecond=999000)
    return monday, sunday


def needs_rollover(timetable: Timetable, now: datetime.datetime) -> bool:
    current = timetable.current_week
    return current is None or now > current.week_end_date


def _next_position(timetable: Timetable) -> int:
    return max((week.position for week in timetable.weeks), default=-1) + 1


def start_new_week(timetable: Timetable, now: datetime.datetime) -> TimetableWeek:
    """Archive the current week (if it tracked anything) and seed a fresh one."""
    current = timetable.current_week
    if current is not None:
        recompute_rates(current)
        if current.activities:
            logger.info(
                "Archiving week %s..%s of timetable %s (%d activities)",
                current.week_start_date.isoformat(),
                current.week_end_date.isoformat(),
                timetable.id,
                len(current.activities),
            )
            current.is_current = False
        else:
            timetable.weeks.remove(current)

    week_start, week_end = week_bounds(now)
    week = TimetableWeek(
        position=_next_position(timetable),
        is_current=True,
        week_start_date=week_start,
        week_end_date=week_end,
        overall_completion_rate=0.0,
    )
    week.activities = [
        DailyProgress.from_activity(activity, position=index)
        for index, activity in enumerate(timetable.catalog)
    ]
    timetable.weeks.append(week)

    logger.info(
        "Started week %s for timetable %s with %d activities",
        week_start.date().isoformat(),
        timetable.id,
        len(week.activities),
    )
    return week


def ensure_current_week(timetable: Timetable, now: datetime.datetime) -> bool:
    """Lazy rollover: start a new week only when the current one has expired."""
    if not needs_rollover(timetable, now):
        return False
    start_new_week(timetable, now)
    return True


__all__ = [
    "week_bounds",
    "needs_rollover",
    "start_new_week",
    "ensure_current_week",
]
