"""Core package exports."""

from .config import (
    BASE_DIR,
    DATABASE_URL,
    DEFAULT_HISTORY_PAGE_SIZE,
    OWNER_HEADER,
    PROXY_PREFIX,
    current_time,
    get_history_max_page_size,
    get_timezone,
)
from .db import Session, create_session, engine, ensure_schema, get_db
from .errors import (
    ConflictError,
    InsightUnavailableError,
    NotFoundError,
    TimetableError,
    ValidationError,
)

__all__ = [
    "BASE_DIR",
    "DATABASE_URL",
    "DEFAULT_HISTORY_PAGE_SIZE",
    "OWNER_HEADER",
    "PROXY_PREFIX",
    "current_time",
    "get_history_max_page_size",
    "get_timezone",
    "engine",
    "Session",
    "create_session",
    "ensure_schema",
    "get_db",
    "TimetableError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InsightUnavailableError",
]
