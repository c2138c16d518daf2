from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("total_duels >= 0", name="ck_users_total_duels_non_negative"),
        CheckConstraint("duels_won >= 0", name="ck_users_duels_won_non_negative"),
        CheckConstraint("duels_lost >= 0", name="ck_users_duels_lost_non_negative"),
        CheckConstraint(
            "current_losing_streak >= 0",
            name="ck_users_current_losing_streak_non_negative",
        ),
        CheckConstraint(
            "longest_losing_streak >= current_losing_streak",
            name="ck_users_longest_losing_streak_high_water",
        ),
        UniqueConstraint("auth_id", name="uq_users_auth_id"),
        Index("idx_users_username", "username"),
        Index("idx_users_leaderboard", "duels_won", "current_losing_streak", "id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    auth_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_duels: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    duels_won: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    duels_lost: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    current_losing_streak: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    longest_losing_streak: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
