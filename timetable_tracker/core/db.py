"""Engine, request sessions and one-time schema setup."""

from __future__ import annotations

import logging
import threading
from typing import Iterator

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlmodel import Session, create_engine

from timetable_tracker.core.config import DATABASE_URL
from timetable_tracker.core.migrations import upgrade_to_head

logger = logging.getLogger(__name__)


def _normalize_database_url(database_url: str) -> str:
    # 日本語: postgres:// 形式は psycopg2 ドライバ指定に揃える / English: Rewrite postgres:// to the psycopg2 dialect
    if database_url.startswith("postgres://"):
        database_url = "postgresql+psycopg2://" + database_url[len("postgres://") :]
    try:
        backend = make_url(database_url).get_backend_name()
    except ArgumentError as exc:
        raise ValueError(f"DATABASE_URL is not a valid database URL: {exc}") from exc
    if backend != "postgresql":
        raise ValueError("DATABASE_URL must be PostgreSQL (postgresql+psycopg2://...).")
    return database_url


# 日本語: 接続は初回利用まで張られない / English: No connection is opened until first use
engine = create_engine(_normalize_database_url(DATABASE_URL), pool_pre_ping=True)

_schema_ready = False
_schema_lock = threading.Lock()


def ensure_schema() -> None:
    """Upgrade the schema to the latest Alembic revision once per process."""
    global _schema_ready
    if _schema_ready:
        return
    with _schema_lock:
        if _schema_ready:
            return
        logger.info("Applying timetable schema migrations")
        upgrade_to_head(engine.url.render_as_string(hide_password=False))
        _schema_ready = True


def create_session() -> Session:
    # 日本語: リクエスト外（スモークテスト等）で使うセッション / English: Session for use outside a request (smoke tests, shells)
    ensure_schema()
    return Session(engine)


def get_db() -> Iterator[Session]:
    # 日本語: 1リクエスト1セッション。未コミット分は close 時に破棄 / English: One session per request; uncommitted work is discarded on close
    with create_session() as db:
        yield db
