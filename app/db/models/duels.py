from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Duel(Base):
    __tablename__ = "duels"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','active','declined','completed')",
            name="ck_duels_status",
        ),
        CheckConstraint(
            "branch_type IN ('mixed','single')",
            name="ck_duels_branch_type",
        ),
        CheckConstraint(
            "selection_type IN ('random','sequential')",
            name="ck_duels_selection_type",
        ),
        CheckConstraint("initiator_id <> opponent_id", name="ck_duels_distinct_participants"),
        CheckConstraint(
            "(test_id IS NULL) <> (course_id IS NULL)",
            name="ck_duels_single_question_source",
        ),
        CheckConstraint("question_count >= 1", name="ck_duels_question_count_positive"),
        Index("idx_duels_opponent_status_created", "opponent_id", "status", "created_at"),
        Index("idx_duels_initiator_status_created", "initiator_id", "status", "created_at"),
        Index("idx_duels_branch_created", "branch_id", "created_at"),
    )

    duel_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    initiator_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    opponent_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    test_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("tests.id"), nullable=True)
    course_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("courses.id"), nullable=True
    )
    question_count: Mapped[int] = mapped_column(Integer, nullable=False)
    branch_type: Mapped[str] = mapped_column(String(16), nullable=False)
    selection_type: Mapped[str] = mapped_column(String(16), nullable=False)
    branch_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("topics.id"), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
