from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duel_results import DuelResult
from app.db.models.duels import Duel
from app.db.models.users import User
from app.db.repo.duels_models import DuelResultAggregate


class DuelResultsRepo:
    @staticmethod
    async def get_by_duel_id(session: AsyncSession, duel_id: int) -> DuelResult | None:
        return await session.get(DuelResult, duel_id)

    @staticmethod
    async def get_with_winner_username(
        session: AsyncSession,
        duel_id: int,
    ) -> tuple[DuelResult, str | None] | None:
        stmt = (
            select(DuelResult, User.username)
            .outerjoin(User, User.id == DuelResult.winner_id)
            .where(DuelResult.duel_id == duel_id)
        )
        result = await session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        return row[0], row[1]

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        duel_id: int,
        winner_id: int | None,
        initiator_score: Decimal,
        opponent_score: Decimal,
        created_at: datetime,
    ) -> DuelResult:
        duel_result = DuelResult(
            duel_id=duel_id,
            winner_id=winner_id,
            initiator_score=initiator_score,
            opponent_score=opponent_score,
            created_at=created_at,
        )
        session.add(duel_result)
        await session.flush()
        return duel_result

    @staticmethod
    async def aggregate_for_user(
        session: AsyncSession,
        *,
        user_id: int,
        completed_status: str,
    ) -> DuelResultAggregate:
        own_score = case(
            (Duel.initiator_id == user_id, DuelResult.initiator_score),
            else_=DuelResult.opponent_score,
        )
        stmt = (
            select(
                func.count(Duel.duel_id),
                func.count(DuelResult.duel_id).filter(DuelResult.winner_id == user_id),
                func.avg(own_score),
            )
            .select_from(Duel)
            .outerjoin(DuelResult, DuelResult.duel_id == Duel.duel_id)
            .where(
                or_(Duel.initiator_id == user_id, Duel.opponent_id == user_id),
                Duel.status == completed_status,
            )
        )
        result = await session.execute(stmt)
        completed_raw, wins_raw, average_raw = result.one()
        return DuelResultAggregate(
            completed_total=int(completed_raw or 0),
            wins=int(wins_raw or 0),
            average_score=Decimal(average_raw) if average_raw is not None else None,
        )
