"""Text helpers for rendering exam sessions in tables and cards."""

from typing import Literal, NamedTuple

from examdesk.domain.filtering import parse_instant
from examdesk.domain.status import ExamStatus

BadgeVariant = Literal["info", "warning", "success", "secondary"]

STATUS_BADGE_VARIANTS: dict[ExamStatus, BadgeVariant] = {
    ExamStatus.PENDING: "info",
    ExamStatus.STARTED: "warning",
    ExamStatus.FINISHED: "success",
}


class DateParts(NamedTuple):
    date_label: str
    time_label: str


def status_badge_variant(status: ExamStatus | str | None) -> BadgeVariant | None:
    """Badge colour for a status; "secondary" for unknown values, None when absent."""
    if not status:
        return None
    try:
        return STATUS_BADGE_VARIANTS[ExamStatus(status)]
    except ValueError:
        return "secondary"


def extract_date_parts(datetime_value: str) -> DateParts:
    """
    Split a session timestamp into date and time labels.

    e.g. "2025-01-10T09:00:00Z" -> ("Fri, Jan 10, 2025", "09:00").
    Unparsable values come back unchanged as the date label with no time.
    """
    parsed = parse_instant(datetime_value)
    if parsed is None:
        return DateParts(datetime_value, "")
    date_label = f"{parsed:%a}, {parsed:%b} {parsed.day}, {parsed.year}"
    return DateParts(date_label, f"{parsed:%H:%M}")


def sessions_found_label(total: int) -> str:
    return f"{total} session{'' if total == 1 else 's'} found"


def showing_label(bounds: tuple[int, int], total: int) -> str:
    first, last = bounds
    return f"Showing {first}-{last} of {total}"


def candidates_preview(candidates: tuple[str, ...], limit: int = 3) -> tuple[list[str], str | None]:
    """First `limit` candidate names and a "+N more" suffix when there are more."""
    shown = list(candidates[:limit])
    hidden = len(candidates) - len(shown)
    return shown, (f"+{hidden} more" if hidden > 0 else None)
