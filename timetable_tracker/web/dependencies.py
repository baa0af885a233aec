"""Request-scoped FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, Response

from timetable_tracker.core.config import OWNER_HEADER


def get_owner_id(request: Request) -> str:
    """Opaque owner id injected by the upstream authentication layer."""
    # 日本語: 認証自体は上流の責務。ヘッダ欠落は 401 / English: Auth happens upstream; a missing header is a 401
    owner_id = (request.headers.get(OWNER_HEADER) or "").strip()
    if not owner_id:
        raise HTTPException(status_code=401, detail="Not authorized")
    return owner_id


def no_store_headers(response: Response) -> None:
    # 日本語: 時間割レスポンスはキャッシュさせない / English: Timetable responses must never be cached
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"
