"""Exam status progression: Pending -> Started -> Finished."""

from enum import Enum as PyEnum
from typing import Any


class ExamStatus(str, PyEnum):
    """Lifecycle stage of an exam session."""

    PENDING = "Pending"
    STARTED = "Started"
    FINISHED = "Finished"


STATUS_ORDER: tuple[ExamStatus, ...] = (
    ExamStatus.PENDING,
    ExamStatus.STARTED,
    ExamStatus.FINISHED,
)


class InvalidStatusError(ValueError):
    """Raised when an explicit status is not one of the known statuses."""

    def __init__(self, status: str) -> None:
        self.status = status
        allowed = ", ".join(s.value for s in STATUS_ORDER)
        super().__init__(f"Unknown exam status {status!r}; expected one of: {allowed}")


def next_status(current: ExamStatus | str) -> ExamStatus | None:
    """
    Return the status following `current`, or None at the terminal status.

    Raises ValueError for values outside the known statuses.
    """
    status = ExamStatus(current)
    index = STATUS_ORDER.index(status)
    if index + 1 < len(STATUS_ORDER):
        return STATUS_ORDER[index + 1]
    return None


def normalize_status(value: Any) -> ExamStatus:
    """Map any value onto a known status; unrecognized values become Pending."""
    if isinstance(value, ExamStatus):
        return value
    try:
        return ExamStatus(value)
    except ValueError:
        return ExamStatus.PENDING


def advance_or_set(
    current: str,
    requested: str | None = None,
    *,
    allow_override: bool = False,
) -> str:
    """
    Resolve the status an exam moves to.

    An explicit, non-blank `requested` status wins. It is stored verbatim when
    `allow_override` is set, otherwise it must be a known status once
    surrounding whitespace is ignored.
    Without one the exam auto-advances one step; Finished stays Finished, and
    a stored value outside the known statuses advances straight to Finished.
    """
    if requested is not None and requested.strip():
        if allow_override:
            return requested
        try:
            return ExamStatus(requested.strip()).value
        except ValueError:
            raise InvalidStatusError(requested) from None

    try:
        following = next_status(current)
    except ValueError:
        return ExamStatus.FINISHED.value
    return (following or ExamStatus.FINISHED).value
