"""LLM model selection routes."""

from __future__ import annotations

from fastapi import APIRouter, Request

import model_selection
from timetable_tracker.web import handlers as web_handlers

router = APIRouter()


@router.get("/api/models", name="list_models")
def list_models():
    # 日本語: 選択肢と現在解決されている設定 / English: Available choices plus the currently resolved selection
    return web_handlers.list_models(model_selection)


@router.post("/model_settings", name="update_model_settings")
async def update_model_settings(request: Request):
    # 日本語: プロセス内の上書きのみ。ファイルは書き換えない / English: In-process override only; the settings file is left untouched
    return await web_handlers.update_model_settings(request, model_selection)
