"""Alembic migration helpers."""

from __future__ import annotations

from alembic import command
from alembic.config import Config

from timetable_tracker.core.config import BASE_DIR


def build_alembic_config(database_url: str) -> Config:
    # 日本語: alembic.ini を読み、接続先とスクリプト位置を上書き / English: Load alembic.ini and override URL and script location
    config = Config(str(BASE_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BASE_DIR / "migrations"))
    config.set_main_option("sqlalchemy.url", database_url)
    # 日本語: アプリ側のロガー設定を上書きしない / English: Keep the application's logging configuration intact
    config.attributes["configure_logger"] = False
    return config


def upgrade_to_head(database_url: str) -> None:
    """Apply timetable schema migrations to the latest revision."""
    command.upgrade(build_alembic_config(database_url), "head")
