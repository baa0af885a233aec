"""Alembic environment for the timetable schema.

Programmatic upgrades (``timetable_tracker.core.migrations``) pass the URL in
the config; command-line runs fall back to ``DATABASE_URL``.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlmodel import SQLModel

from timetable_tracker import models as _models  # noqa: F401

config = context.config

# 日本語: CLI 実行時のみ alembic.ini のロガー設定を適用 / English: alembic.ini logging applies to CLI runs only
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

MIGRATION_OPTIONS = {"target_metadata": SQLModel.metadata, "compare_type": True}


def _database_url() -> str:
    url = config.get_main_option("sqlalchemy.url") or os.getenv("DATABASE_URL")
    if not url:
        raise ValueError("Set sqlalchemy.url or DATABASE_URL before running timetable migrations.")
    return url


def _emit_sql() -> None:
    context.configure(url=_database_url(), literal_binds=True, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def _apply() -> None:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **MIGRATION_OPTIONS)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    _emit_sql()
else:
    _apply()
