"""
Sessions table view model.

Combines column filters, sorting, pagination and row selection over the
normalized exam list, plus the async list fetch and status advance that feed
it. State lives for one admin session and is never persisted.
"""

import asyncio
import logging
import math
from collections.abc import Callable, Iterable
from typing import Any

from examdesk.client.api import ExamApiClient, ExamClientError
from examdesk.config import get_settings
from examdesk.domain.filtering import matches_candidate, sort_by_datetime
from examdesk.domain.status import STATUS_ORDER, next_status, normalize_status
from examdesk.schemas.sessions import ExamSession

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Unable to load exam sessions. Please try again."
UPDATE_ERROR_MESSAGE = "Unable to update the exam status. Please try again."

DEFAULT_SORT_COLUMN = "datetime"

# Table column -> row predicate. These are looser than the API criteria:
# the schedule matches by text prefix and the location by substring.
FILTER_COLUMNS: dict[str, Callable[[ExamSession, str], bool]] = {
    "status": lambda e, v: e.status.value == v,
    "datetime": lambda e, v: e.datetime.startswith(v),
    "candidates": lambda e, v: matches_candidate(e.candidates, v),
    "location": lambda e, v: v.casefold() in e.location.country.casefold(),
    "language": lambda e, v: e.language == v,
}

SORT_KEYS: dict[str, Callable[[ExamSession], Any]] = {
    "title": lambda e: e.title.casefold(),
    "status": lambda e: STATUS_ORDER.index(e.status),
    "language": lambda e: e.language.casefold(),
    "location": lambda e: e.location.country.casefold(),
    "candidates": lambda e: ", ".join(e.candidates).casefold(),
}


class ExamTableViewModel:
    """Filter/sort/paginate/select state for the sessions table."""

    def __init__(self, sessions: Iterable[ExamSession] = (), *, page_size: int | None = None) -> None:
        self.page_size = page_size or get_settings().default_page_size
        if self.page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_index = 0
        self.sort_column = DEFAULT_SORT_COLUMN
        self.sort_descending = False
        self.selected_id: int | None = None

        self.is_loading = False
        self.error: str | None = None
        self.update_error: str | None = None

        self._sessions: list[ExamSession] = list(sessions)
        self._filters: dict[str, str] = {}
        self._rows: list[ExamSession] = []
        self._updating: set[int] = set()
        self._load_task: asyncio.Future[list[ExamSession]] | None = None
        self._refresh()

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def sessions(self) -> list[ExamSession]:
        """All loaded sessions, unfiltered."""
        return list(self._sessions)

    @property
    def rows(self) -> list[ExamSession]:
        """Filtered and sorted sessions across all pages."""
        return list(self._rows)

    @property
    def total(self) -> int:
        return len(self._rows)

    @property
    def filters(self) -> dict[str, str]:
        return dict(self._filters)

    @property
    def has_active_filters(self) -> bool:
        """True when any filter is set or the sort differs from the default."""
        return bool(self._filters) or (
            self.sort_column != DEFAULT_SORT_COLUMN or self.sort_descending
        )

    @property
    def page_count(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def can_previous_page(self) -> bool:
        return self.page_index > 0

    @property
    def can_next_page(self) -> bool:
        return self.page_index + 1 < self.page_count

    @property
    def visible_rows(self) -> list[ExamSession]:
        """Rows on the current page."""
        start = self.page_index * self.page_size
        return self._rows[start : start + self.page_size]

    @property
    def bounds(self) -> tuple[int, int]:
        """1-based (from, to) row numbers shown on the current page; (0, 0) when empty."""
        if self.total == 0:
            return (0, 0)
        first = self.page_index * self.page_size + 1
        last = min(self.total, (self.page_index + 1) * self.page_size)
        return (first, last)

    @property
    def selected(self) -> ExamSession | None:
        if self.selected_id is None:
            return None
        return next((s for s in self._sessions if s.id == self.selected_id), None)

    def filter_options(self, column: str) -> list[str]:
        """Distinct values offered for an exact-match filter column."""
        if column == "status":
            return [s.value for s in STATUS_ORDER]
        if column == "location":
            values = {s.location.country for s in self._sessions}
        elif column == "language":
            values = {s.language for s in self._sessions if s.language}
        else:
            raise KeyError(f"No options for column {column!r}")
        return sorted(values, key=str.casefold)

    def is_updating(self, exam_id: int) -> bool:
        return exam_id in self._updating

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def set_sessions(self, sessions: Iterable[ExamSession]) -> None:
        """Replace the loaded sessions."""
        self._sessions = list(sessions)
        self._refresh()

    def apply_filter(self, column: str, value: str | None) -> None:
        """Set (or with an empty value, clear) a column filter and go back to the first page."""
        if column not in FILTER_COLUMNS:
            raise KeyError(f"Unknown filter column {column!r}")
        if value and value.strip():
            self._filters[column] = value
        else:
            self._filters.pop(column, None)
        self.page_index = 0
        self._refresh()

    def reset_view(self) -> None:
        """Clear filters and restore the default sort. Selection is kept if still visible."""
        self._filters = {}
        self.sort_column = DEFAULT_SORT_COLUMN
        self.sort_descending = False
        self.page_index = 0
        self._refresh()

    def set_sort(self, column: str, descending: bool = False) -> None:
        if column != DEFAULT_SORT_COLUMN and column not in SORT_KEYS:
            raise KeyError(f"Column {column!r} is not sortable")
        self.sort_column = column
        self.sort_descending = descending
        self.page_index = 0
        self._refresh()

    def toggle_sort(self, column: str) -> None:
        """Sort by `column` ascending, or flip the direction if it is already the sort column."""
        if column == self.sort_column:
            self.set_sort(column, not self.sort_descending)
        else:
            self.set_sort(column)

    def set_page(self, page_index: int) -> None:
        last = max(self.page_count - 1, 0)
        self.page_index = min(max(page_index, 0), last)

    def next_page(self) -> None:
        if self.can_next_page:
            self.page_index += 1

    def previous_page(self) -> None:
        if self.can_previous_page:
            self.page_index -= 1

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.page_index = 0

    def select(self, exam_id: int) -> bool:
        """Select a row in the filtered set. Returns False if it is not there."""
        if not any(row.id == exam_id for row in self._rows):
            return False
        self.selected_id = exam_id
        return True

    def clear_selection(self) -> None:
        self.selected_id = None

    def _refresh(self) -> None:
        by_datetime = self.sort_column == DEFAULT_SORT_COLUMN
        rows = sort_by_datetime(
            (
                s
                for s in self._sessions
                if all(FILTER_COLUMNS[col](s, value) for col, value in self._filters.items())
            ),
            descending=by_datetime and self.sort_descending,
        )
        if not by_datetime:
            rows.sort(key=SORT_KEYS[self.sort_column], reverse=self.sort_descending)
        self._rows = rows

        # Drop selection if the active row disappears due to filtering
        if self.selected_id is not None and not any(r.id == self.selected_id for r in rows):
            self.selected_id = None

        if self.page_count and self.page_index >= self.page_count:
            self.page_index = self.page_count - 1

    # -------------------------------------------------------------------------
    # Remote operations
    # -------------------------------------------------------------------------

    async def load(self, client: ExamApiClient) -> None:
        """
        Fetch the exam list and replace the loaded sessions.

        Starting a new load (or calling cancel_load) supersedes one in flight;
        the superseded result is discarded without touching the view.
        Failures end up in `error`, they are not raised.
        """
        self.cancel_load()
        task = asyncio.ensure_future(client.list_exams())
        self._load_task = task
        self.is_loading = True
        self.error = None

        try:
            sessions = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug("Exam list fetch superseded; result discarded")
            return
        except ExamClientError:
            logger.exception("Failed to fetch exams")
            if task is self._load_task:
                self.error = LOAD_ERROR_MESSAGE
        else:
            if task is self._load_task:
                self.set_sessions(sessions)
        finally:
            if task is self._load_task:
                self._load_task = None
                self.is_loading = False

    def cancel_load(self) -> None:
        """Abort an in-flight load, e.g. when the view goes away."""
        if self._load_task is not None:
            self._load_task.cancel()
            self._load_task = None
            self.is_loading = False

    async def advance_status(self, client: ExamApiClient, exam_id: int) -> ExamSession | None:
        """
        Move an exam to its next status.

        Does nothing (returns None) if the exam is unknown, already Finished or
        already being updated. Failures are logged and stored in
        `update_error`. Returns the updated session on success.
        """
        session = next((s for s in self._sessions if s.id == exam_id), None)
        if session is None or exam_id in self._updating:
            return None
        target = next_status(session.status)
        if target is None:
            return None

        self._updating.add(exam_id)
        self.update_error = None
        try:
            result = await client.update_status(exam_id, target.value)
        except ExamClientError:
            logger.exception("Failed to update exam status for exam %s", exam_id)
            self.update_error = UPDATE_ERROR_MESSAGE
            return None
        finally:
            self._updating.discard(exam_id)

        # A load may have replaced the row while the request was in flight
        current = next((s for s in self._sessions if s.id == exam_id), None)
        if current is None:
            return None
        updated = current.model_copy(update={"status": normalize_status(result.status)})
        self._sessions = [updated if s.id == exam_id else s for s in self._sessions]
        self._refresh()
        return updated

    def advance_label(self, exam_id: int) -> str | None:
        """Label for the advance button, or None when the exam is Finished."""
        session = next((s for s in self._sessions if s.id == exam_id), None)
        if session is None:
            return None
        if self.is_updating(exam_id):
            return "Updating…"
        target = next_status(session.status)
        return f"Advance to {target.value}" if target is not None else None
