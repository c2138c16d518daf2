from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.duels import Duel
from app.db.repo.catalog_repo import CatalogRepo
from app.db.repo.duels_repo import DuelsRepo
from app.db.repo.users_repo import UsersRepo
from app.game.duels.constants import (
    DUEL_STATUS_ACTIVE,
    DUEL_STATUS_DECLINED,
    DUEL_STATUS_PENDING,
)
from app.game.duels.errors import (
    DuelAccessError,
    DuelBranchNotFoundError,
    DuelCourseNotFoundError,
    DuelInvalidInputError,
    DuelInvalidStateError,
    DuelNotFoundError,
    DuelOpponentNotFoundError,
    DuelTestNotFoundError,
)
from app.game.duels.internal import build_duel_snapshot
from app.game.duels.rules import (
    parse_identifier,
    resolve_branch_type,
    resolve_question_count,
    resolve_question_source,
    resolve_selection_type,
)
from app.game.duels.types import CourseSource, DuelSnapshot, QuizTestSource

logger = structlog.get_logger(__name__)


async def challenge_user(
    session: AsyncSession,
    *,
    initiator_id: int,
    opponent_id: object,
    now_utc: datetime,
    test_id: int | None = None,
    course_id: int | None = None,
    question_count: int | None = None,
    branch_type: str | None = None,
    selection_type: str | None = None,
    branch_id: int | None = None,
) -> DuelSnapshot:
    resolved_opponent_id = parse_identifier(opponent_id, field="opponent_id")
    source = resolve_question_source(test_id=test_id, course_id=course_id)
    if resolved_opponent_id == initiator_id:
        raise DuelInvalidInputError("cannot challenge yourself")

    settings = get_settings()
    resolved_question_count = resolve_question_count(
        question_count,
        default=settings.duel_default_question_count,
        maximum=settings.duel_max_question_count,
    )
    resolved_branch_type = resolve_branch_type(branch_type)
    resolved_selection_type = resolve_selection_type(selection_type)

    if await UsersRepo.get_by_id(session, resolved_opponent_id) is None:
        raise DuelOpponentNotFoundError
    if test_id is not None and await CatalogRepo.get_test_by_id(session, test_id) is None:
        raise DuelTestNotFoundError
    if course_id is not None and await CatalogRepo.get_course_by_id(session, course_id) is None:
        raise DuelCourseNotFoundError
    if branch_id is not None and await CatalogRepo.get_topic_by_id(session, branch_id) is None:
        raise DuelBranchNotFoundError

    linked_test_id = source.test_id if isinstance(source, QuizTestSource) else None
    linked_course_id = source.course_id if isinstance(source, CourseSource) else None
    duel = await DuelsRepo.create(
        session,
        duel=Duel(
            initiator_id=initiator_id,
            opponent_id=resolved_opponent_id,
            test_id=linked_test_id,
            course_id=linked_course_id,
            question_count=resolved_question_count,
            branch_type=resolved_branch_type,
            selection_type=resolved_selection_type,
            branch_id=branch_id,
            status=DUEL_STATUS_PENDING,
            created_at=now_utc,
        ),
    )
    logger.info(
        "duel_challenge_created",
        duel_id=duel.duel_id,
        initiator_id=initiator_id,
        opponent_id=resolved_opponent_id,
        course_id=duel.course_id,
        test_id=duel.test_id,
        question_count=resolved_question_count,
    )
    return build_duel_snapshot(duel)


async def _load_pending_duel_for_opponent(
    session: AsyncSession,
    *,
    duel_id: int,
    user_id: int,
) -> Duel:
    duel = await DuelsRepo.get_by_id_for_update(session, duel_id)
    if duel is None:
        raise DuelNotFoundError
    if duel.opponent_id != user_id:
        raise DuelAccessError
    if duel.status != DUEL_STATUS_PENDING:
        raise DuelInvalidStateError
    return duel


async def accept_duel(
    session: AsyncSession,
    *,
    duel_id: int,
    user_id: int,
    now_utc: datetime,
) -> DuelSnapshot:
    duel = await _load_pending_duel_for_opponent(session, duel_id=duel_id, user_id=user_id)
    moved = await DuelsRepo.transition_status(
        session,
        duel_id=duel.duel_id,
        from_status=DUEL_STATUS_PENDING,
        to_status=DUEL_STATUS_ACTIVE,
        start_time=now_utc,
    )
    if not moved:
        raise DuelInvalidStateError
    await session.refresh(duel)
    logger.info("duel_accepted", duel_id=duel.duel_id, opponent_id=user_id)
    return build_duel_snapshot(duel)


async def decline_duel(
    session: AsyncSession,
    *,
    duel_id: int,
    user_id: int,
    now_utc: datetime,
) -> None:
    duel = await _load_pending_duel_for_opponent(session, duel_id=duel_id, user_id=user_id)
    moved = await DuelsRepo.transition_status(
        session,
        duel_id=duel.duel_id,
        from_status=DUEL_STATUS_PENDING,
        to_status=DUEL_STATUS_DECLINED,
        end_time=now_utc,
    )
    if not moved:
        raise DuelInvalidStateError
    logger.info("duel_declined", duel_id=duel.duel_id, opponent_id=user_id)
