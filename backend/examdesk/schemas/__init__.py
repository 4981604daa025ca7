"""Pydantic schemas for API request/response validation."""

from examdesk.schemas.exams import (
    CandidateRead,
    ExamCriteria,
    ExamRead,
    ExamStatusResponse,
    ExamStatusUpdate,
)
from examdesk.schemas.sessions import ApiCandidate, ApiExam, ExamLocation, ExamSession

__all__ = [
    # Exams API
    "CandidateRead",
    "ExamCriteria",
    "ExamRead",
    "ExamStatusResponse",
    "ExamStatusUpdate",
    # Client-side records
    "ApiCandidate",
    "ApiExam",
    "ExamLocation",
    "ExamSession",
]
