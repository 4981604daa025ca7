"""Initial schema: exams, candidates and their association.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Creates:
- exams: scheduled sessions with status, datetime, language and location
- candidates: candidate names
- exam_candidates: many-to-many link between the two
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # EXAMS TABLE
    # ==========================================================================
    op.create_table(
        "exams",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("status", sa.String(50), server_default="Pending", nullable=False),
        sa.Column("datetime", sa.DateTime(timezone=False), nullable=False),
        sa.Column("language", sa.String(100), nullable=False),
        sa.Column("country", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_exams_datetime", "exams", ["datetime"])
    op.create_index("idx_exams_status", "exams", ["status"])
    op.create_index("idx_exams_country", "exams", ["country"])

    # ==========================================================================
    # CANDIDATES TABLE
    # ==========================================================================
    op.create_table(
        "candidates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # ==========================================================================
    # EXAM_CANDIDATES TABLE
    # ==========================================================================
    op.create_table(
        "exam_candidates",
        sa.Column("exam_id", sa.Integer(), nullable=False),
        sa.Column("candidate_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("exam_id", "candidate_id"),
        sa.ForeignKeyConstraint(["exam_id"], ["exams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["candidate_id"], ["candidates.id"], ondelete="CASCADE"),
    )
    # Reverse lookup for the candidate-name filter
    op.create_index("idx_exam_candidates_candidate_id", "exam_candidates", ["candidate_id"])


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_index("idx_exam_candidates_candidate_id", table_name="exam_candidates")
    op.drop_table("exam_candidates")
    op.drop_table("candidates")
    op.drop_index("idx_exams_country", table_name="exams")
    op.drop_index("idx_exams_status", table_name="exams")
    op.drop_index("idx_exams_datetime", table_name="exams")
    op.drop_table("exams")
