from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Numeric, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class DuelResult(Base):
    __tablename__ = "duel_results"
    __table_args__ = (
        CheckConstraint(
            "initiator_score >= 0",
            name="ck_duel_results_initiator_score_non_negative",
        ),
        CheckConstraint(
            "opponent_score >= 0",
            name="ck_duel_results_opponent_score_non_negative",
        ),
        Index("idx_duel_results_winner", "winner_id"),
    )

    duel_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("duels.duel_id"), primary_key=True
    )
    winner_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True
    )
    initiator_score: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    opponent_score: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
