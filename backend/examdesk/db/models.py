"""
SQLAlchemy 2.0 Models for Examdesk.

Uses modern declarative syntax with Mapped[] type annotations.
Exams and candidates are linked many-to-many through exam_candidates.
"""

import datetime as dt
from typing import Optional

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Table, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from examdesk.db.base import Base


# =============================================================================
# ASSOCIATION TABLES
# =============================================================================


exam_candidates = Table(
    "exam_candidates",
    Base.metadata,
    Column("exam_id", Integer, ForeignKey("exams.id", ondelete="CASCADE"), primary_key=True),
    Column("candidate_id", Integer, ForeignKey("candidates.id", ondelete="CASCADE"), primary_key=True),
    Index("idx_exam_candidates_candidate_id", "candidate_id"),
)


# =============================================================================
# MODELS
# =============================================================================


class Exam(Base):
    """
    Scheduled exam session.

    Rows are seeded outside this service; the only field mutated here is status.
    Status is a plain string column because seeded rows are not guaranteed to
    hold one of the known values.
    """

    __tablename__ = "exams"
    __table_args__ = (
        Index("idx_exams_datetime", "datetime"),
        Index("idx_exams_status", "status"),
        Index("idx_exams_country", "country"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Pending", server_default="Pending")
    datetime: Mapped[dt.datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    language: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), onupdate=func.now(), nullable=False
    )

    # Relationships
    candidates: Mapped[list["Candidate"]] = relationship(
        "Candidate",
        secondary=exam_candidates,
        back_populates="exams",
        order_by="Candidate.id",
    )


class Candidate(Base):
    """Person sitting one or more exams. Only the name is stored."""

    __tablename__ = "candidates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )

    # Relationships
    exams: Mapped[list["Exam"]] = relationship(
        "Exam", secondary=exam_candidates, back_populates="candidates"
    )
