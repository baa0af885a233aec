"""Timetable context rendering and LLM-backed summaries."""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from sqlmodel import Session

from llm_client import UnifiedClient
from timetable_tracker.core.errors import InsightUnavailableError, ValidationError
from timetable_tracker.models import Timetable, TimetableWeek
from timetable_tracker.services.timetable_service import get_timetable

logger = logging.getLogger(__name__)

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
RECENT_HISTORY_WEEKS = 4

SUMMARY_SYSTEM_PROMPT = (
    "You summarize a user's weekly timetable progress. "
    "Use only the data provided, keep it under 150 words, and end with one concrete suggestion."
)


def _week_lines(week: TimetableWeek) -> List[str]:
    lines = [
        f"week {week.week_start_date.date().isoformat()}..{week.week_end_date.date().isoformat()}"
        f" overall={week.overall_completion_rate:.1f}%"
    ]
    for progress in week.activities:
        done_days = [label for label, done in zip(DAY_LABELS, progress.daily_status) if done]
        lines.append(
            f"- {progress.time} {progress.name} ({progress.category})"
            f" rate={progress.completion_rate:.1f}% done={','.join(done_days) or 'none'}"
        )
    if week.notes:
        lines.append(f"notes: {week.notes}")
    return lines


def _build_timetable_context(timetable: Timetable) -> str:
    history = timetable.history[-RECENT_HISTORY_WEEKS:]
    current = timetable.current_week

    context_parts = [
        f"timetable: {timetable.name}",
        f"description: {timetable.description or '(none)'}",
        "current_week:",
        *(_week_lines(current) if current else ["(none)"]),
        "recent_history:",
    ]
    if history:
        for week in reversed(history):
            context_parts.extend(_week_lines(week))
    else:
        context_parts.append("(none)")
    return "\n".join(context_parts)


def summarize_timetable(
    db: Session,
    owner_id: str,
    timetable_id: Any,
    question: Any = None,
    *,
    client_factory: Callable[[], Any] = UnifiedClient,
) -> str:
    if question is not None and not isinstance(question, str):
        raise ValidationError("question must be a string", field="question")

    timetable = get_timetable(db, owner_id, timetable_id)
    context = _build_timetable_context(timetable)

    try:
        client = client_factory()
    except RuntimeError as exc:
        raise InsightUnavailableError(str(exc)) from exc

    prompt = question.strip() if question and question.strip() else "Summarize my progress."
    messages = [
        {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
        {"role": "user", "content": f"{prompt}\n\n{context}"},
    ]
    try:
        return client.complete_text(messages, temperature=0.3)
    except Exception:
        logger.exception("Timetable summary request failed for timetable %s", timetable_id)
        raise


__all__ = ["_build_timetable_context", "summarize_timetable"]
