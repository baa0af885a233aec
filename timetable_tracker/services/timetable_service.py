"""Timetable operations over a database session.

Each public function performs one read-modify-write cycle on a single
timetable owned by ``owner_id``. Lookups of another owner's timetable are
reported as not found. Derived completion rates are recomputed on every save.
"""

from __future__ import annotations

import datetime
import logging
import math
from typing import Any, Dict, List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from timetable_tracker.core.config import DEFAULT_HISTORY_PAGE_SIZE, current_time, get_history_max_page_size
from timetable_tracker.core.errors import ConflictError, NotFoundError, ValidationError
from timetable_tracker.models import DAYS_PER_WEEK, CatalogActivity, Timetable, TimetableWeek
from timetable_tracker.services.catalog_service import (
    DEFAULT_ACTIVITIES,
    apply_catalog_edit,
    duration_minutes,
    validate_activities,
)
from timetable_tracker.services.completion_service import recompute_timetable_rates, repair_progress
from timetable_tracker.services.progress_service import toggle_daily_status, validate_day_index
from timetable_tracker.services.week_service import ensure_current_week, start_new_week

logger = logging.getLogger(__name__)

DEFAULT_TIMETABLE_NAME = "Default Timetable"
DUPLICATE_NAME_MESSAGE = "A timetable with this name already exists"


def _clean_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name is required", field="name")
    cleaned = name.strip()
    if len(cleaned) > 100:
        raise ValidationError("Name must be at most 100 characters", field="name")
    return cleaned


def _clean_text(value: Any, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    return value.strip()


def _positive_int(value: Any, field: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a positive integer", field=field)
    if isinstance(value, bool) or parsed < 1:
        raise ValidationError(f"{field} must be a positive integer", field=field)
    return parsed


def _owned_timetables(db: Session, owner_id: str) -> List[Timetable]:
    return list(db.exec(select(Timetable).where(Timetable.owner_id == owner_id).order_by(Timetable.id)).all())


def _find_by_name(db: Session, owner_id: str, name: str) -> Timetable | None:
    return db.exec(select(Timetable).where(Timetable.owner_id == owner_id, Timetable.name == name)).first()


def _get_owned_timetable(db: Session, owner_id: str, timetable_id: Any) -> Timetable:
    try:
        lookup_id = int(timetable_id)
    except (TypeError, ValueError):
        raise NotFoundError("Timetable not found or not authorized")
    timetable = db.exec(
        select(Timetable).where(Timetable.id == lookup_id, Timetable.owner_id == owner_id)
    ).first()
    if timetable is None:
        raise NotFoundError("Timetable not found or not authorized")
    return timetable


def _save(db: Session, timetable: Timetable) -> Timetable:
    recompute_timetable_rates(timetable)
    timetable.updated_at = current_time()
    db.add(timetable)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(DUPLICATE_NAME_MESSAGE) from exc
    db.refresh(timetable)
    return timetable


def _repair_timetable(timetable: Timetable) -> bool:
    changed = False
    for week in timetable.weeks:
        for progress in week.activities:
            changed = repair_progress(progress) or changed
    return changed


def _new_timetable(owner_id: str, name: str, description: str | None, activities, is_active: bool, now) -> Timetable:
    timetable = Timetable(owner_id=owner_id, name=name, description=description, is_active=is_active)
    timetable.default_activities = [
        CatalogActivity.from_activity(activity, position=index) for index, activity in enumerate(activities)
    ]
    start_new_week(timetable, now)
    return timetable


def timetable_summary(timetable: Timetable) -> Dict[str, Any]:
    current = timetable.current_week
    return {
        "id": timetable.id,
        "name": timetable.name,
        "description": timetable.description,
        "is_active": timetable.is_active,
        "created_at": timetable.created_at,
        "updated_at": timetable.updated_at,
        "activities_count": len(timetable.default_activities),
        "completion_rate": current.overall_completion_rate if current else 0.0,
    }


def create_timetable(
    db: Session,
    owner_id: str,
    name: Any,
    description: Any = None,
    default_activities: Any = None,
    *,
    now: datetime.datetime | None = None,
) -> Timetable:
    cleaned_name = _clean_name(name)
    cleaned_description = _clean_text(description, "description")
    activities = validate_activities(default_activities) if default_activities else list(DEFAULT_ACTIVITIES)

    if _find_by_name(db, owner_id, cleaned_name) is not None:
        raise ConflictError(DUPLICATE_NAME_MESSAGE)

    owned = _owned_timetables(db, owner_id)
    timetable = _new_timetable(
        owner_id,
        cleaned_name,
        cleaned_description,
        activities,
        is_active=not any(item.is_active for item in owned),
        now=now or current_time(),
    )
    _save(db, timetable)
    logger.info("Created timetable %s for owner %s", timetable.id, owner_id)
    return timetable


def list_timetables(db: Session, owner_id: str) -> List[Dict[str, Any]]:
    return [timetable_summary(timetable) for timetable in _owned_timetables(db, owner_id)]


def get_timetable(db: Session, owner_id: str, timetable_id: Any) -> Timetable:
    return _get_owned_timetable(db, owner_id, timetable_id)


def update_timetable(
    db: Session,
    owner_id: str,
    timetable_id: Any,
    *,
    name: Any = None,
    description: Any = None,
    is_active: Any = None,
    notes: Any = None,
) -> Timetable:
    if is_active is not None and not isinstance(is_active, bool):
        raise ValidationError("is_active must be a boolean", field="is_active")
    cleaned_description = _clean_text(description, "description")
    cleaned_notes = _clean_text(notes, "notes")

    timetable = _get_owned_timetable(db, owner_id, timetable_id)

    cleaned_name = None
    if name is not None:
        cleaned_name = _clean_name(name)
        if cleaned_name != timetable.name:
            existing = _find_by_name(db, owner_id, cleaned_name)
            if existing is not None and existing.id != timetable.id:
                raise ConflictError(DUPLICATE_NAME_MESSAGE)

    if cleaned_name is not None:
        timetable.name = cleaned_name
    if cleaned_description is not None:
        timetable.description = cleaned_description
    if cleaned_notes is not None and timetable.current_week is not None:
        timetable.current_week.notes = cleaned_notes

    if is_active is not None:
        timetable.is_active = is_active
        if is_active:
            # 日本語: 同一トランザクション内で他の時間割を非アクティブ化 / English: Deactivate siblings in the same transaction
            for other in _owned_timetables(db, owner_id):
                if other.id != timetable.id and other.is_active:
                    other.is_active = False
                    db.add(other)
            logger.info("Timetable %s is now active for owner %s", timetable.id, owner_id)

    return _save(db, timetable)


def delete_timetable(db: Session, owner_id: str, timetable_id: Any) -> None:
    timetable = _get_owned_timetable(db, owner_id, timetable_id)
    owned = _owned_timetables(db, owner_id)
    if len(owned) <= 1:
        raise ConflictError("Cannot delete the only timetable. Create another one first.")

    if timetable.is_active:
        successor = next(item for item in owned if item.id != timetable.id)
        successor.is_active = True
        db.add(successor)
        logger.info("Promoted timetable %s to active after deleting %s", successor.id, timetable.id)

    db.delete(timetable)
    db.commit()
    logger.info("Deleted timetable %s for owner %s", timetable_id, owner_id)


def _resolve_active_timetable(db: Session, owner_id: str, now: datetime.datetime) -> Tuple[Timetable, bool]:
    owned = _owned_timetables(db, owner_id)
    for timetable in owned:
        if timetable.is_active:
            return timetable, False

    if owned:
        owned[0].is_active = True
        return owned[0], True

    logger.info("Owner %s has no timetable; creating the default one", owner_id)
    return _new_timetable(owner_id, DEFAULT_TIMETABLE_NAME, None, DEFAULT_ACTIVITIES, True, now), True


def get_current_week(
    db: Session,
    owner_id: str,
    timetable_id: Any = None,
    *,
    now: datetime.datetime | None = None,
) -> Tuple[Timetable, TimetableWeek]:
    """Fetch the current week, rolling over first if it has expired.

    This read can write: a lazy rollover or a repaired status vector is
    persisted before returning.
    """
    now = now or current_time()
    if timetable_id is None:
        timetable, changed = _resolve_active_timetable(db, owner_id, now)
    else:
        timetable, changed = _get_owned_timetable(db, owner_id, timetable_id), False

    changed = _repair_timetable(timetable) or changed
    if ensure_current_week(timetable, now):
        logger.info("Week of timetable %s has ended; rolled over", timetable.id)
        changed = True

    if changed:
        _save(db, timetable)
    return timetable, timetable.current_week


def toggle_status(db: Session, owner_id: str, timetable_id: Any, activity_id: Any, day_index: Any) -> TimetableWeek:
    validate_day_index(day_index)
    timetable = _get_owned_timetable(db, owner_id, timetable_id)
    week = timetable.current_week
    if week is None:
        raise NotFoundError("Activity not found")

    toggle_daily_status(week, activity_id, day_index)
    _save(db, timetable)
    return timetable.current_week


def update_catalog(
    db: Session, owner_id: str, timetable_id: Any, activities: Any
) -> Tuple[List[CatalogActivity], TimetableWeek | None]:
    validated = validate_activities(activities)
    timetable = _get_owned_timetable(db, owner_id, timetable_id)

    apply_catalog_edit(timetable, validated)
    _save(db, timetable)
    return timetable.default_activities, timetable.current_week


def force_new_week(
    db: Session, owner_id: str, timetable_id: Any, *, now: datetime.datetime | None = None
) -> TimetableWeek:
    timetable = _get_owned_timetable(db, owner_id, timetable_id)
    start_new_week(timetable, now or current_time())
    _save(db, timetable)
    return timetable.current_week


def get_history(
    db: Session,
    owner_id: str,
    timetable_id: Any,
    page: Any = 1,
    page_size: Any = DEFAULT_HISTORY_PAGE_SIZE,
) -> Dict[str, Any]:
    page_number = _positive_int(page, "page")
    size = min(_positive_int(page_size, "limit"), get_history_max_page_size())
    timetable = _get_owned_timetable(db, owner_id, timetable_id)

    history = timetable.history
    if not history:
        return {"entries": [], "current_page": page_number, "total_pages": 0, "total_weeks": 0}

    start = (page_number - 1) * size
    return {
        "entries": history[start : start + size],
        "current_page": page_number,
        "total_pages": math.ceil(len(history) / size),
        "total_weeks": len(history),
    }


def _planned_minutes(time_range: str) -> int:
    try:
        return duration_minutes(time_range)
    except ValidationError:
        return 0


def get_stats(db: Session, owner_id: str, timetable_id: Any) -> Dict[str, Any]:
    timetable = _get_owned_timetable(db, owner_id, timetable_id)
    current = timetable.current_week

    by_category: Dict[str, Dict[str, Any]] = {}
    for progress in current.activities if current else []:
        entry = by_category.setdefault(progress.category, {"total": 0, "completed": 0, "planned_minutes": 0})
        entry["total"] += DAYS_PER_WEEK
        entry["completed"] += sum(1 for done in progress.daily_status if done)
        entry["planned_minutes"] += _planned_minutes(progress.time) * DAYS_PER_WEEK
    for entry in by_category.values():
        entry["completion_rate"] = 100 * entry["completed"] / entry["total"]

    weeks = timetable.history + ([current] if current else [])
    overall: Dict[str, Any] = {
        "total_weeks": len(weeks),
        "average_completion_rate": 0.0,
        "best_week": None,
        "worst_week": None,
    }
    if weeks:
        ranked = sorted(weeks, key=lambda week: week.overall_completion_rate, reverse=True)
        overall["average_completion_rate"] = sum(week.overall_completion_rate for week in weeks) / len(weeks)
        overall["best_week"] = {
            "week_start_date": ranked[0].week_start_date,
            "completion_rate": ranked[0].overall_completion_rate,
        }
        overall["worst_week"] = {
            "week_start_date": ranked[-1].week_start_date,
            "completion_rate": ranked[-1].overall_completion_rate,
        }

    return {
        "current_week": {
            "completion_rate": current.overall_completion_rate if current else 0.0,
            "by_category": by_category,
        },
        "overall": overall,
    }


def list_categories(db: Session, owner_id: str) -> List[str]:
    categories: Dict[str, None] = {}
    for timetable in _owned_timetables(db, owner_id):
        for item in timetable.default_activities:
            categories.setdefault(item.category, None)
    return list(categories)


__all__ = [
    "DEFAULT_TIMETABLE_NAME",
    "timetable_summary",
    "create_timetable",
    "list_timetables",
    "get_timetable",
    "update_timetable",
    "delete_timetable",
    "get_current_week",
    "toggle_status",
    "update_catalog",
    "force_new_week",
    "get_history",
    "get_stats",
    "list_categories",
]
