"""Timetable API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from timetable_tracker.core.config import current_time
from timetable_tracker.core.db import get_db
from timetable_tracker.web import handlers as web_handlers
from timetable_tracker.web.dependencies import get_owner_id, no_store_headers

# 日本語: 時間割API群（全レスポンスをキャッシュ禁止に） / English: Timetable API router, every response marked no-store
router = APIRouter(prefix="/api/timetables", dependencies=[Depends(no_store_headers)])


@router.get("", name="list_timetables")
def list_timetables(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return web_handlers.list_timetables(db, owner_id)


@router.post("", status_code=201, name="create_timetable")
async def create_timetable(request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return await web_handlers.create_timetable(request, db, owner_id, now_fn=current_time)


# 日本語: 固定パスは /{timetable_id} より先に登録する / English: Static paths must be registered before /{timetable_id}
@router.get("/current-week", name="active_current_week")
def active_current_week(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    # 日本語: 週が終わっていれば読み取り時に新しい週へ切り替える / English: Reading may roll an expired week over
    return web_handlers.get_current_week(db, owner_id, now_fn=current_time)


@router.get("/categories", name="timetable_categories")
def timetable_categories(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return web_handlers.list_categories(db, owner_id)


@router.get("/{timetable_id}", name="get_timetable")
def get_timetable(timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return web_handlers.get_timetable(timetable_id, db, owner_id)


@router.put("/{timetable_id}", name="update_timetable")
async def update_timetable(
    request: Request, timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)
):
    return await web_handlers.update_timetable(request, timetable_id, db, owner_id)


@router.delete("/{timetable_id}", name="delete_timetable")
def delete_timetable(timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return web_handlers.delete_timetable(timetable_id, db, owner_id)


@router.get("/{timetable_id}/current-week", name="timetable_current_week")
def timetable_current_week(
    timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)
):
    return web_handlers.get_current_week(db, owner_id, timetable_id, now_fn=current_time)


@router.get("/{timetable_id}/history", name="timetable_history")
def timetable_history(
    request: Request, timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)
):
    return web_handlers.get_history(request, timetable_id, db, owner_id)


@router.post("/{timetable_id}/toggle", name="toggle_activity_status")
async def toggle_activity_status(
    request: Request, timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)
):
    return await web_handlers.toggle_status(request, timetable_id, db, owner_id)


@router.put("/{timetable_id}/activities", name="update_default_activities")
async def update_default_activities(
    request: Request, timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)
):
    return await web_handlers.update_activities(request, timetable_id, db, owner_id)


@router.get("/{timetable_id}/stats", name="timetable_stats")
def timetable_stats(timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return web_handlers.get_stats(timetable_id, db, owner_id)


@router.post("/{timetable_id}/new-week", name="start_new_week")
def start_new_week(timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    # 日本語: 期限前でも現在週をアーカイブして作り直す / English: Archive and recreate even before the week expires
    return web_handlers.force_new_week(timetable_id, db, owner_id, now_fn=current_time)
