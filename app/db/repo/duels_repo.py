from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Select, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.db.models.courses import Course
from app.db.models.duel_results import DuelResult
from app.db.models.duels import Duel
from app.db.models.quiz_tests import QuizTest
from app.db.models.users import User
from app.db.repo.duels_models import DuelListRow


def _list_stmt(*, with_result: bool = False) -> Select[Any]:
    initiator = aliased(User, name="initiator")
    opponent = aliased(User, name="opponent")
    columns: list[Any] = [
        Duel,
        initiator.username,
        opponent.username,
        QuizTest.title,
        Course.title,
    ]
    if with_result:
        columns.append(DuelResult)
    stmt = (
        select(*columns)
        .join(initiator, initiator.id == Duel.initiator_id)
        .join(opponent, opponent.id == Duel.opponent_id)
        .outerjoin(QuizTest, QuizTest.id == Duel.test_id)
        .outerjoin(Course, Course.id == Duel.course_id)
    )
    if with_result:
        stmt = stmt.outerjoin(DuelResult, DuelResult.duel_id == Duel.duel_id)
    return stmt


def _as_rows(raw_rows: list[Any], *, with_result: bool = False) -> list[DuelListRow]:
    rows: list[DuelListRow] = []
    for raw in raw_rows:
        rows.append(
            DuelListRow(
                duel=raw[0],
                initiator_username=raw[1],
                opponent_username=raw[2],
                test_title=raw[3],
                course_title=raw[4],
                result=raw[5] if with_result else None,
            )
        )
    return rows


def _participant_filter(user_id: int):
    return or_(Duel.initiator_id == user_id, Duel.opponent_id == user_id)


class DuelsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, duel_id: int) -> Duel | None:
        return await session.get(Duel, duel_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, duel_id: int) -> Duel | None:
        stmt = select(Duel).where(Duel.duel_id == duel_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_row_by_id(session: AsyncSession, duel_id: int) -> DuelListRow | None:
        stmt = _list_stmt().where(Duel.duel_id == duel_id)
        result = await session.execute(stmt)
        rows = _as_rows(list(result.all()))
        return rows[0] if rows else None

    @staticmethod
    async def create(session: AsyncSession, *, duel: Duel) -> Duel:
        session.add(duel)
        await session.flush()
        return duel

    @staticmethod
    async def transition_status(
        session: AsyncSession,
        *,
        duel_id: int,
        from_status: str,
        to_status: str,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> bool:
        values: dict[str, object] = {"status": to_status}
        if start_time is not None:
            values["start_time"] = start_time
        if end_time is not None:
            values["end_time"] = end_time
        stmt = (
            update(Duel)
            .where(Duel.duel_id == duel_id, Duel.status == from_status)
            .values(**values)
            .returning(Duel.duel_id)
            .execution_options(synchronize_session="fetch")
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_pending_for_opponent(
        session: AsyncSession,
        *,
        user_id: int,
        status: str,
    ) -> list[DuelListRow]:
        stmt = (
            _list_stmt()
            .where(Duel.opponent_id == user_id, Duel.status == status)
            .order_by(Duel.created_at.desc(), Duel.duel_id.desc())
        )
        result = await session.execute(stmt)
        return _as_rows(list(result.all()))

    @staticmethod
    async def list_for_participant(
        session: AsyncSession,
        *,
        user_id: int,
        status: str,
    ) -> list[DuelListRow]:
        stmt = (
            _list_stmt()
            .where(_participant_filter(user_id), Duel.status == status)
            .order_by(Duel.start_time.desc().nulls_last(), Duel.duel_id.desc())
        )
        result = await session.execute(stmt)
        return _as_rows(list(result.all()))

    @staticmethod
    async def list_completed_with_results(
        session: AsyncSession,
        *,
        user_id: int,
        status: str,
    ) -> list[DuelListRow]:
        stmt = (
            _list_stmt(with_result=True)
            .where(_participant_filter(user_id), Duel.status == status)
            .order_by(Duel.end_time.desc().nulls_last(), Duel.duel_id.desc())
        )
        result = await session.execute(stmt)
        return _as_rows(list(result.all()), with_result=True)

    @staticmethod
    async def list_by_branch(session: AsyncSession, *, branch_id: int) -> list[DuelListRow]:
        stmt = (
            _list_stmt()
            .where(Duel.branch_id == branch_id)
            .order_by(Duel.created_at.desc(), Duel.duel_id.desc())
        )
        result = await session.execute(stmt)
        return _as_rows(list(result.all()))
