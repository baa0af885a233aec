"""AI insight routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from timetable_tracker.core.db import get_db
from timetable_tracker.services.insight_service import summarize_timetable
from timetable_tracker.web import handlers as web_handlers
from timetable_tracker.web.dependencies import get_owner_id

router = APIRouter()


@router.post("/api/timetables/{timetable_id}/insights", name="timetable_insights")
async def timetable_insights(
    request: Request, timetable_id: int, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)
):
    # 日本語: 時間割データの要約を LLM に依頼 / English: Ask the LLM to summarize the timetable data
    return await web_handlers.timetable_insights(
        request,
        timetable_id,
        db,
        owner_id,
        summarize_timetable_fn=summarize_timetable,
    )
