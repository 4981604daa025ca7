"""Exam list and status routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from examdesk.api.deps import AppSettings, DbSession
from examdesk.config import sanitize_error
from examdesk.domain.status import InvalidStatusError
from examdesk.schemas.exams import ExamCriteria, ExamRead, ExamStatusResponse, ExamStatusUpdate
from examdesk.services import exam_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exams", tags=["exams"])


@router.get("", response_model=list[ExamRead])
async def list_exams(
    db: DbSession,
    criteria: Annotated[ExamCriteria, Query()],
) -> list[ExamRead]:
    """
    List exam sessions with their candidates.

    Filters (all optional, combined with AND):
    - status, country, language: exact match
    - date: YYYY-MM-DD, matches exams scheduled on that day
    - candidate: case-insensitive substring of any candidate name

    Always ordered by datetime ascending.
    """
    try:
        exams = await exam_query.list_exams(db, criteria)
    except SQLAlchemyError as e:
        logger.error("Failed to list exams: %s", str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=sanitize_error(e, generic_message="Unable to load exam sessions."),
        )
    return [ExamRead.model_validate(exam) for exam in exams]


@router.put("/{exam_id}/status", response_model=ExamStatusResponse)
async def update_exam_status(
    exam_id: int,
    db: DbSession,
    settings: AppSettings,
    data: Annotated[ExamStatusUpdate | None, Body()] = None,
) -> ExamStatusResponse:
    """
    Advance (or directly set) the status of a single exam.

    Without a status in the body the exam moves one step along
    Pending -> Started -> Finished; Finished stays Finished.
    """
    requested = data.status if data is not None else None
    try:
        exam = await exam_query.update_exam_status(
            db,
            exam_id,
            requested,
            allow_override=settings.allow_status_override,
        )
    except exam_query.ExamNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exam not found")
    except InvalidStatusError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except SQLAlchemyError as e:
        logger.error("Failed to update status of exam %s: %s", exam_id, str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=sanitize_error(e, generic_message="Failed to update exam status."),
        )

    return ExamStatusResponse(id=exam.id, status=exam.status)
