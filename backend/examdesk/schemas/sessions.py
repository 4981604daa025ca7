"""
Client-side exam records.

ApiExam/ApiCandidate describe the raw wire record with every field nullable.
Values of the wrong shape (a string latitude, a non-list candidate field) are
read as null here; the normalizer is the only place nulls are replaced.
ExamSession/ExamLocation are the canonical, null-free forms.
"""

import datetime as dt
import math
from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator

from examdesk.domain.status import ExamStatus
from examdesk.schemas.base import FrozenSchema, WireSchema

UNKNOWN_COUNTRY = "Unknown location"


def _optional_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return None


def _optional_str(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _optional_finite(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


class ApiCandidate(WireSchema):
    """Candidate as sent by the API."""

    id: int | None = None
    name: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> int | None:
        return _optional_int(v)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str | None:
        return _optional_str(v)


class ApiExam(WireSchema):
    """Exam as sent by GET /exams."""

    id: int | None = None
    title: str | None = None
    status: str | None = None
    datetime: str | None = None
    language: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    candidates: list[ApiCandidate] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> int | None:
        return _optional_int(v)

    @field_validator("title", "status", "datetime", "language", "country", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        return _optional_str(v)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def coerce_coordinate(cls, v: Any) -> float | None:
        return _optional_finite(v)

    @field_validator("candidates", mode="before")
    @classmethod
    def coerce_candidates(cls, v: Any) -> list[Any] | None:
        if not isinstance(v, (list, tuple)):
            return None
        return [c for c in v if isinstance(c, (Mapping, ApiCandidate))]


class ExamLocation(FrozenSchema):
    """Where an exam takes place. Always present on a session."""

    country: str = UNKNOWN_COUNTRY
    latitude: float = 0.0
    longitude: float = 0.0


class ExamSession(FrozenSchema):
    """Canonical exam session used by the table and map views."""

    id: int | None = None
    title: str = ""
    status: ExamStatus = ExamStatus.PENDING
    datetime: str = ""
    language: str = ""
    candidates: tuple[str, ...] = ()
    location: ExamLocation = Field(default_factory=ExamLocation)
