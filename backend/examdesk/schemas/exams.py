"""Exam schemas."""

import datetime as dt
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from examdesk.schemas.base import BaseSchema


class ExamCriteria(BaseSchema):
    """
    Optional, conjunctive filters for the exam list.

    Blank values are treated as absent. `candidate` is a substring matched
    against candidate names.
    """

    status: str | None = None
    country: str | None = None
    language: str | None = None
    date: dt.date | None = None
    candidate: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Read empty strings as "no constraint"."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def is_empty(self) -> bool:
        """True when no constraint is set."""
        return not self.model_dump(exclude_none=True)

    def to_query_params(self) -> dict[str, str]:
        """Render the set criteria as GET /exams query parameters."""
        return self.model_dump(mode="json", exclude_none=True)


class CandidateRead(BaseSchema):
    """Candidate embedded in an exam record."""

    id: int
    name: str


class ExamRead(BaseSchema):
    """Schema for reading exam data, candidates included."""

    id: int
    title: str
    status: str
    datetime: dt.datetime
    language: str
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    candidates: list[CandidateRead] = Field(default_factory=list)


class ExamStatusUpdate(BaseSchema):
    """
    Body of PUT /exams/{id}/status. Without a status the exam auto-advances.

    The status is kept exactly as sent so an override stores it verbatim.
    """

    model_config = ConfigDict(str_strip_whitespace=False)

    status: str | None = Field(None, max_length=50)


class ExamStatusResponse(BaseSchema):
    """Result of a status update."""

    id: int
    status: str
    message: str = "Exam status updated."
