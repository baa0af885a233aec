"""ASGI entrypoint (``uvicorn timetable_tracker.asgi:app``)."""

import logging

from timetable_tracker.core.config import LOG_LEVEL

# Setup logging before the application modules start emitting records
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

from .application import app, create_app  # noqa: E402

__all__ = ["app", "create_app"]
