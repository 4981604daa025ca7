"""In-memory exam filtering and datetime ordering."""

import datetime as dt
from collections.abc import Iterable

from examdesk.schemas.exams import ExamCriteria
from examdesk.schemas.sessions import ExamSession


def parse_instant(value: str) -> dt.datetime | None:
    """
    Parse an ISO-8601 timestamp, or return None if it cannot be parsed.

    Naive timestamps are read as UTC so that mixed formats compare as instants.
    """
    if not value:
        return None
    try:
        parsed = dt.datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def instant_sort_key(value: str) -> tuple[int, float]:
    """Sort key ordering parsable timestamps by instant, unparsable ones last."""
    parsed = parse_instant(value)
    if parsed is None:
        return (1, 0.0)
    return (0, parsed.timestamp())


def matches_day(value: str, day: dt.date) -> bool:
    """True when the timestamp falls on `day` (in its own offset)."""
    parsed = parse_instant(value)
    if parsed is None:
        return value.startswith(day.isoformat())
    return parsed.date() == day


def matches_candidate(candidates: Iterable[str], needle: str) -> bool:
    """Case-insensitive substring match against any candidate name."""
    needle = needle.casefold()
    return any(needle in name.casefold() for name in candidates)


def matches_criteria(exam: ExamSession, criteria: ExamCriteria) -> bool:
    """True when the exam satisfies every set criterion."""
    if criteria.status and exam.status.value != criteria.status:
        return False
    if criteria.country and exam.location.country != criteria.country:
        return False
    if criteria.language and exam.language != criteria.language:
        return False
    if criteria.date and not matches_day(exam.datetime, criteria.date):
        return False
    if criteria.candidate and not matches_candidate(exam.candidates, criteria.candidate):
        return False
    return True


def sort_by_datetime(exams: Iterable[ExamSession], *, descending: bool = False) -> list[ExamSession]:
    """Order sessions by scheduled instant; unparsable datetimes always go last."""
    exams = list(exams)
    parsed = [e for e in exams if parse_instant(e.datetime) is not None]
    unparsed = [e for e in exams if parse_instant(e.datetime) is None]
    parsed.sort(key=lambda e: instant_sort_key(e.datetime), reverse=descending)
    return parsed + unparsed


def filter_exams(exams: Iterable[ExamSession], criteria: ExamCriteria | None = None) -> list[ExamSession]:
    """
    Return the sessions matching all criteria, ascending by datetime.

    Absent criteria impose no constraint. The result is not paginated.
    """
    if criteria is None or criteria.is_empty():
        return sort_by_datetime(exams)
    return sort_by_datetime(e for e in exams if matches_criteria(e, criteria))
