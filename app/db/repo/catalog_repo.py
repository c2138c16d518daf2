from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.courses import Course
from app.db.models.quiz_tests import QuizTest
from app.db.models.topics import Topic


class CatalogRepo:
    @staticmethod
    async def get_test_by_id(session: AsyncSession, test_id: int) -> QuizTest | None:
        return await session.get(QuizTest, test_id)

    @staticmethod
    async def get_course_by_id(session: AsyncSession, course_id: int) -> Course | None:
        return await session.get(Course, course_id)

    @staticmethod
    async def get_topic_by_id(session: AsyncSession, topic_id: int) -> Topic | None:
        return await session.get(Topic, topic_id)
