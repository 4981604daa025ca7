"""Map raw API exam records onto canonical ExamSession objects."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from examdesk.domain.status import normalize_status
from examdesk.schemas.sessions import UNKNOWN_COUNTRY, ApiExam, ExamLocation, ExamSession

logger = logging.getLogger(__name__)


def _as_api_exam(raw: Any) -> ApiExam:
    if isinstance(raw, ApiExam):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring exam record of type %s", type(raw).__name__)
        return ApiExam()
    try:
        return ApiExam.model_validate(raw)
    except ValidationError:
        logger.warning("Malformed exam record, using defaults: %r", raw, exc_info=True)
        return ApiExam()


def normalize_exam(raw: ApiExam | Mapping[str, Any]) -> ExamSession:
    """
    Convert an API exam record into the shape the views expect.

    Never raises: every field has a fallback. Unknown statuses become Pending,
    a missing country becomes "Unknown location", missing or non-numeric
    coordinates become 0, and candidates are reduced to their non-empty names.
    Datetime strings are passed through untouched.
    """
    exam = _as_api_exam(raw)
    return ExamSession(
        id=exam.id,
        title=exam.title or "",
        status=normalize_status(exam.status),
        datetime=exam.datetime or "",
        language=exam.language or "",
        candidates=tuple(c.name for c in exam.candidates or () if c.name),
        location=ExamLocation(
            country=exam.country or UNKNOWN_COUNTRY,
            latitude=exam.latitude if exam.latitude is not None else 0.0,
            longitude=exam.longitude if exam.longitude is not None else 0.0,
        ),
    )


def normalize_exam_list(raws: Iterable[ApiExam | Mapping[str, Any]]) -> list[ExamSession]:
    """Normalize a list of exam records, preserving order."""
    return [normalize_exam(raw) for raw in raws]
