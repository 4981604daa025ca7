"""Exam queries and the status update against the database."""

import datetime as dt
import logging

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from examdesk.db.models import Candidate, Exam
from examdesk.domain.status import advance_or_set
from examdesk.schemas.exams import ExamCriteria

logger = logging.getLogger(__name__)


class ExamNotFoundError(LookupError):
    """No exam with the requested id."""

    def __init__(self, exam_id: int) -> None:
        self.exam_id = exam_id
        super().__init__(f"Exam {exam_id} not found")


def build_exam_query(criteria: ExamCriteria | None = None) -> Select[tuple[Exam]]:
    """
    Build the exam list query.

    Candidates are eager-loaded. Criteria are ANDed together and the result
    is ordered by datetime ascending regardless of which filters apply.
    """
    query = select(Exam).options(selectinload(Exam.candidates))

    if criteria is not None:
        if criteria.status:
            query = query.where(Exam.status == criteria.status)
        if criteria.country:
            query = query.where(Exam.country == criteria.country)
        if criteria.language:
            query = query.where(Exam.language == criteria.language)
        if criteria.date:
            # Half-open day range keeps the datetime index usable
            day_start = dt.datetime.combine(criteria.date, dt.time.min)
            query = query.where(
                Exam.datetime >= day_start,
                Exam.datetime < day_start + dt.timedelta(days=1),
            )
        if criteria.candidate:
            query = query.where(
                Exam.candidates.any(Candidate.name.icontains(criteria.candidate, autoescape=True))
            )

    return query.order_by(Exam.datetime.asc(), Exam.id.asc())


async def list_exams(db: AsyncSession, criteria: ExamCriteria | None = None) -> list[Exam]:
    """Fetch the filtered exam list."""
    result = await db.execute(build_exam_query(criteria))
    return list(result.scalars().all())


async def update_exam_status(
    db: AsyncSession,
    exam_id: int,
    requested: str | None = None,
    *,
    allow_override: bool = False,
) -> Exam:
    """
    Advance an exam's status, or set it to `requested`.

    The write is an unconditional overwrite; concurrent callers race and the
    last write wins. Raises ExamNotFoundError for unknown ids and
    InvalidStatusError for a rejected explicit status.
    """
    exam = await db.get(Exam, exam_id)
    if exam is None:
        raise ExamNotFoundError(exam_id)

    previous = exam.status
    exam.status = advance_or_set(previous, requested, allow_override=allow_override)
    await db.commit()
    logger.info("Exam %s status %s -> %s", exam_id, previous, exam.status)
    return exam
