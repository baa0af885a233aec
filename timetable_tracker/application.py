"""FastAPI application assembly."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from timetable_tracker.core.config import PROXY_PREFIX, get_timezone
from timetable_tracker.core.db import ensure_schema
from timetable_tracker.web.routers import insight_router, model_router, timetable_router

logger = logging.getLogger(__name__)

ROUTERS = (timetable_router, insight_router, model_router)


def create_app() -> FastAPI:
    # 日本語: 不正なタイムゾーン設定はアプリ生成時に検出 / English: An unknown time zone setting fails app creation
    timezone = get_timezone()

    # 日本語: 逆プロキシ配下では PROXY_PREFIX を root_path に使う / English: PROXY_PREFIX becomes root_path behind a reverse proxy
    app = FastAPI(title="Timetable Tracker", root_path=os.getenv("PROXY_PREFIX", PROXY_PREFIX))
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

    for router in ROUTERS:
        app.include_router(router)

    @app.on_event("startup")
    def _apply_migrations() -> None:
        # 日本語: 最初のリクエスト前にスキーマを最新化 / English: Bring the schema up to date before the first request
        ensure_schema()
        logger.info("Timetable Tracker ready (week boundaries in %s)", timezone.key)

    return app


# 日本語: import 時点で既定アプリを構築 / English: Build default app instance at import time
app = create_app()
