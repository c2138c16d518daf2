from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def get_by_auth_id(session: AsyncSession, auth_id: str) -> User | None:
        stmt = select(User).where(User.auth_id == auth_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        username: str,
        email: str | None = None,
        auth_id: str | None = None,
    ) -> User:
        user = User(
            username=username,
            email=email,
            auth_id=auth_id,
            total_duels=0,
            duels_won=0,
            duels_lost=0,
            current_losing_streak=0,
            longest_losing_streak=0,
        )
        session.add(user)
        await session.flush()
        return user

    @staticmethod
    async def record_duel_win(session: AsyncSession, user_id: int) -> int:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                total_duels=User.total_duels + 1,
                duels_won=User.duels_won + 1,
                current_losing_streak=0,
            )
        )
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def record_duel_loss(session: AsyncSession, user_id: int) -> int:
        # SET expressions read the pre-update row, so both streak columns see the old value.
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                total_duels=User.total_duels + 1,
                duels_lost=User.duels_lost + 1,
                current_losing_streak=User.current_losing_streak + 1,
                longest_losing_streak=func.greatest(
                    User.longest_losing_streak,
                    User.current_losing_streak + 1,
                ),
            )
        )
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def record_duel_draw(session: AsyncSession, user_id: int) -> int:
        stmt = update(User).where(User.id == user_id).values(total_duels=User.total_duels + 1)
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def count_ranked(session: AsyncSession) -> int:
        stmt = select(func.count(User.id)).where(User.total_duels > 0)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def list_ranked(
        session: AsyncSession,
        *,
        limit: int,
        offset: int,
    ) -> list[User]:
        stmt = (
            select(User)
            .where(User.total_duels > 0)
            .order_by(
                User.duels_won.desc(),
                User.current_losing_streak.asc(),
                User.id.asc(),
            )
            .limit(limit)
            .offset(offset)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_opponent_candidates(
        session: AsyncSession,
        *,
        user_id: int,
        reference_wins: int,
        limit: int,
    ) -> list[User]:
        stmt = (
            select(User)
            .where(User.id != user_id)
            .order_by(
                func.abs(User.duels_won - reference_wins).asc(),
                User.total_duels.desc(),
                User.id.asc(),
            )
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
