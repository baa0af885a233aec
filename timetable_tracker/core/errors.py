"""Error types raised by timetable services.

Handlers translate these into HTTP responses; services raise them before
touching any persisted state.
"""

from __future__ import annotations


class TimetableError(Exception):
    """Base exception for timetable operations."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(TimetableError):
    """Raised when a required field is missing or malformed.

    Attributes:
        field: Name of the offending field, when one can be pointed at
    """

    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class NotFoundError(TimetableError):
    """Raised when a timetable or activity does not resolve for the owner."""

    status_code = 404


class ConflictError(TimetableError):
    """Raised on duplicate names or when deleting the last timetable."""

    status_code = 409


class InsightUnavailableError(TimetableError):
    """Raised when the LLM provider is not configured."""

    status_code = 503
