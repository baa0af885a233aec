"""HTTP handler implementations used by the routers."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import HTTPException, Request
from sqlmodel import Session

from timetable_tracker.core.config import DEFAULT_HISTORY_PAGE_SIZE
from timetable_tracker.core.errors import TimetableError
from timetable_tracker.models import CatalogActivity, DailyProgress, Timetable, TimetableWeek
from timetable_tracker.services import timetable_service


def _http_error(exc: TimetableError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


async def _read_json(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError:
        payload = {}
    return payload if isinstance(payload, dict) else {}


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def _serialize_catalog(items: List[CatalogActivity]) -> List[Dict[str, str]]:
    return [item.activity.as_dict() for item in items]


def _serialize_progress(progress: DailyProgress) -> Dict[str, Any]:
    return {
        "id": progress.id,
        "activity": progress.activity.as_dict(),
        "daily_status": list(progress.daily_status),
        "completion_rate": progress.completion_rate,
    }


def _serialize_week(week: TimetableWeek | None) -> Dict[str, Any] | None:
    if week is None:
        return None
    return {
        "id": week.id,
        "week_start_date": _iso(week.week_start_date),
        "week_end_date": _iso(week.week_end_date),
        "activities": [_serialize_progress(progress) for progress in week.activities],
        "overall_completion_rate": week.overall_completion_rate,
        "notes": week.notes,
    }


def _serialize_summary(summary: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **summary,
        "created_at": _iso(summary["created_at"]),
        "updated_at": _iso(summary["updated_at"]),
    }


def _serialize_timetable(timetable: Timetable) -> Dict[str, Any]:
    return {
        "id": timetable.id,
        "name": timetable.name,
        "description": timetable.description,
        "is_active": timetable.is_active,
        "created_at": _iso(timetable.created_at),
        "updated_at": _iso(timetable.updated_at),
        "default_activities": _serialize_catalog(timetable.default_activities),
        "current_week": _serialize_week(timetable.current_week),
        "history": [_serialize_week(week) for week in timetable.history],
    }


def list_timetables(db: Session, owner_id: str):
    summaries = timetable_service.list_timetables(db, owner_id)
    return {"count": len(summaries), "data": [_serialize_summary(item) for item in summaries]}


async def create_timetable(request: Request, db: Session, owner_id: str, *, now_fn):
    payload = await _read_json(request)
    try:
        timetable = timetable_service.create_timetable(
            db,
            owner_id,
            payload.get("name"),
            payload.get("description"),
            payload.get("default_activities"),
            now=now_fn(),
        )
    except TimetableError as exc:
        raise _http_error(exc)
    return {"data": _serialize_timetable(timetable)}


def get_current_week(db: Session, owner_id: str, timetable_id: int | None = None, *, now_fn):
    try:
        timetable, week = timetable_service.get_current_week(db, owner_id, timetable_id, now=now_fn())
    except TimetableError as exc:
        raise _http_error(exc)
    return {
        "timetable_id": timetable.id,
        "timetable_name": timetable.name,
        "data": _serialize_week(week),
    }


def list_categories(db: Session, owner_id: str):
    return {"categories": timetable_service.list_categories(db, owner_id)}


def get_timetable(timetable_id: int, db: Session, owner_id: str):
    try:
        timetable = timetable_service.get_timetable(db, owner_id, timetable_id)
    except TimetableError as exc:
        raise _http_error(exc)
    return {"data": _serialize_timetable(timetable)}


async def update_timetable(request: Request, timetable_id: int, db: Session, owner_id: str):
    payload = await _read_json(request)
    try:
        timetable = timetable_service.update_timetable(
            db,
            owner_id,
            timetable_id,
            name=payload.get("name"),
            description=payload.get("description"),
            is_active=payload.get("is_active"),
            notes=payload.get("notes"),
        )
    except TimetableError as exc:
        raise _http_error(exc)
    return {"data": _serialize_timetable(timetable)}


def delete_timetable(timetable_id: int, db: Session, owner_id: str):
    try:
        timetable_service.delete_timetable(db, owner_id, timetable_id)
    except TimetableError as exc:
        raise _http_error(exc)
    return {"message": "Timetable deleted successfully"}


def get_history(request: Request, timetable_id: int, db: Session, owner_id: str):
    page = request.query_params.get("page", "1")
    limit = request.query_params.get("limit", str(DEFAULT_HISTORY_PAGE_SIZE))
    try:
        result = timetable_service.get_history(db, owner_id, timetable_id, page, limit)
    except TimetableError as exc:
        raise _http_error(exc)
    return {
        "history": [_serialize_week(week) for week in result["entries"]],
        "current_page": result["current_page"],
        "total_pages": result["total_pages"],
        "total_weeks": result["total_weeks"],
    }


async def toggle_status(request: Request, timetable_id: int, db: Session, owner_id: str):
    payload = await _read_json(request)
    try:
        week = timetable_service.toggle_status(
            db,
            owner_id,
            timetable_id,
            payload.get("activity_id"),
            payload.get("day_index"),
        )
    except TimetableError as exc:
        raise _http_error(exc)
    return {"data": _serialize_week(week)}


async def update_activities(request: Request, timetable_id: int, db: Session, owner_id: str):
    payload = await _read_json(request)
    try:
        default_activities, week = timetable_service.update_catalog(
            db, owner_id, timetable_id, payload.get("activities")
        )
    except TimetableError as exc:
        raise _http_error(exc)
    return {
        "data": {
            "default_activities": _serialize_catalog(default_activities),
            "current_week": _serialize_week(week),
        }
    }


def get_stats(timetable_id: int, db: Session, owner_id: str):
    try:
        stats = timetable_service.get_stats(db, owner_id, timetable_id)
    except TimetableError as exc:
        raise _http_error(exc)
    overall = stats["overall"]
    for key in ("best_week", "worst_week"):
        if overall[key] is not None:
            overall[key] = {**overall[key], "week_start_date": _iso(overall[key]["week_start_date"])}
    return {"data": stats}


def force_new_week(timetable_id: int, db: Session, owner_id: str, *, now_fn):
    try:
        week = timetable_service.force_new_week(db, owner_id, timetable_id, now=now_fn())
    except TimetableError as exc:
        raise _http_error(exc)
    return {"message": "New week started successfully", "data": _serialize_week(week)}


async def timetable_insights(
    request: Request,
    timetable_id: int,
    db: Session,
    owner_id: str,
    *,
    summarize_timetable_fn,
):
    payload = await _read_json(request)
    try:
        summary = summarize_timetable_fn(db, owner_id, timetable_id, payload.get("question"))
    except TimetableError as exc:
        raise _http_error(exc)
    except Exception as exc:
        raise HTTPException(status_code=502, detail=f"Insight generation failed: {exc}")
    return {"timetable_id": timetable_id, "summary": summary}


def _applied(selection) -> Dict[str, Any]:
    provider, model, base_url, _api_key = selection
    return {"provider": provider, "model": model, "base_url": base_url}


def list_models(selector):
    return {"models": selector.current_available_models(), "current": _applied(selector.apply_model_selection())}


async def update_model_settings(request: Request, selector):
    payload = await _read_json(request)
    # 日本語: {"selection": {"timetable": {...}}} と素の {...} の両方を受け付ける / English: Accept both the wrapped and the bare selection shape
    selection = payload.get("selection", payload)
    if isinstance(selection, dict) and "timetable" in selection:
        selection = selection["timetable"]
    if selection is not None and not isinstance(selection, dict):
        raise HTTPException(status_code=400, detail="selection must be an object")
    return {"status": "ok", "applied": _applied(selector.update_override(selection or None))}
