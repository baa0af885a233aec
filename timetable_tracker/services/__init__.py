"""Service-layer exports."""

from .catalog_service import (
    DEFAULT_ACTIVITIES,
    apply_catalog_edit,
    duration_minutes,
    parse_time_range,
    validate_activities,
)
from .completion_service import normalize_daily_status, recompute_rates, recompute_timetable_rates
from .insight_service import _build_timetable_context, summarize_timetable
from .progress_service import toggle_daily_status, validate_day_index
from .timetable_service import (
    create_timetable,
    delete_timetable,
    force_new_week,
    get_current_week,
    get_history,
    get_stats,
    get_timetable,
    list_categories,
    list_timetables,
    toggle_status,
    update_catalog,
    update_timetable,
)
from .week_service import ensure_current_week, needs_rollover, start_new_week, week_bounds

__all__ = [
    "DEFAULT_ACTIVITIES",
    "apply_catalog_edit",
    "duration_minutes",
    "parse_time_range",
    "validate_activities",
    "normalize_daily_status",
    "recompute_rates",
    "recompute_timetable_rates",
    "_build_timetable_context",
    "summarize_timetable",
    "toggle_daily_status",
    "validate_day_index",
    "create_timetable",
    "delete_timetable",
    "force_new_week",
    "get_current_week",
    "get_history",
    "get_stats",
    "get_timetable",
    "list_categories",
    "list_timetables",
    "toggle_status",
    "update_catalog",
    "update_timetable",
    "ensure_current_week",
    "needs_rollover",
    "start_new_week",
    "week_bounds",
]
