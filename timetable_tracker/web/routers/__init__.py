"""Router exports."""

# 日本語: 各機能ルーターを集約して application.py から一括 import 可能にする / English: Re-export feature routers for centralized app wiring
from .insight_router import router as insight_router
from .model_router import router as model_router
from .timetable_router import router as timetable_router

__all__ = [
    "timetable_router",
    "insight_router",
    "model_router",
]
