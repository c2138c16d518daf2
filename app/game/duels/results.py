from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duels import Duel
from app.db.repo.duel_results_repo import DuelResultsRepo
from app.db.repo.duels_repo import DuelsRepo
from app.db.repo.users_repo import UsersRepo
from app.game.duels.constants import DUEL_STATUS_ACTIVE, DUEL_STATUS_COMPLETED
from app.game.duels.errors import (
    DuelAccessError,
    DuelInvalidInputError,
    DuelInvalidStateError,
    DuelNotFoundError,
    DuelUserNotFoundError,
)
from app.game.duels.internal import build_result_snapshot
from app.game.duels.rules import parse_identifier, parse_score, resolve_winner_id
from app.game.duels.types import DuelResultSnapshot

logger = structlog.get_logger(__name__)


async def _apply_duel_outcome(
    session: AsyncSession,
    *,
    duel: Duel,
    winner_id: int | None,
) -> None:
    if winner_id is None:
        await UsersRepo.record_duel_draw(session, duel.initiator_id)
        await UsersRepo.record_duel_draw(session, duel.opponent_id)
        return

    loser_id = duel.opponent_id if winner_id == duel.initiator_id else duel.initiator_id
    await UsersRepo.record_duel_win(session, winner_id)
    await UsersRepo.record_duel_loss(session, loser_id)


async def _complete_duel(
    session: AsyncSession,
    *,
    duel: Duel,
    winner_id: int | None,
    initiator_score: Decimal,
    opponent_score: Decimal,
    now_utc: datetime,
) -> DuelResultSnapshot:
    moved = await DuelsRepo.transition_status(
        session,
        duel_id=duel.duel_id,
        from_status=DUEL_STATUS_ACTIVE,
        to_status=DUEL_STATUS_COMPLETED,
        end_time=now_utc,
    )
    if not moved:
        logger.warning("duel_result_race_lost", duel_id=duel.duel_id)
        raise DuelInvalidStateError

    duel_result = await DuelResultsRepo.create(
        session,
        duel_id=duel.duel_id,
        winner_id=winner_id,
        initiator_score=initiator_score,
        opponent_score=opponent_score,
        created_at=now_utc,
    )
    await _apply_duel_outcome(session, duel=duel, winner_id=winner_id)
    logger.info(
        "duel_result_submitted",
        duel_id=duel.duel_id,
        winner_id=winner_id,
        initiator_score=str(initiator_score),
        opponent_score=str(opponent_score),
    )
    return build_result_snapshot(duel_result)


async def submit_duel_result(
    session: AsyncSession,
    *,
    duel_id: int,
    user_id: int,
    initiator_score: object,
    opponent_score: object,
    now_utc: datetime,
) -> DuelResultSnapshot:
    resolved_initiator_score = parse_score(initiator_score, field="initiator_score")
    resolved_opponent_score = parse_score(opponent_score, field="opponent_score")

    duel = await DuelsRepo.get_by_id_for_update(session, duel_id)
    if duel is None:
        raise DuelNotFoundError
    if user_id not in {duel.initiator_id, duel.opponent_id}:
        raise DuelAccessError
    if duel.status != DUEL_STATUS_ACTIVE:
        raise DuelInvalidStateError

    winner_id = resolve_winner_id(
        initiator_id=duel.initiator_id,
        opponent_id=duel.opponent_id,
        initiator_score=resolved_initiator_score,
        opponent_score=resolved_opponent_score,
    )
    return await _complete_duel(
        session,
        duel=duel,
        winner_id=winner_id,
        initiator_score=resolved_initiator_score,
        opponent_score=resolved_opponent_score,
        now_utc=now_utc,
    )


async def record_duel_result(
    session: AsyncSession,
    *,
    duel_id: object,
    user_id: int,
    winner_id: object,
    initiator_score: object,
    opponent_score: object,
    now_utc: datetime,
) -> DuelResultSnapshot:
    """Records a result with an explicitly named winner.

    Used by clients that score the duel themselves, so the winner is taken as
    given instead of being derived from the scores. Only a participant may
    record the result.
    """
    resolved_duel_id = parse_identifier(duel_id, field="duel_id")
    resolved_initiator_score = parse_score(initiator_score, field="initiator_score")
    resolved_opponent_score = parse_score(opponent_score, field="opponent_score")
    resolved_winner_id = (
        parse_identifier(winner_id, field="winner_id") if winner_id is not None else None
    )

    duel = await DuelsRepo.get_by_id_for_update(session, resolved_duel_id)
    if duel is None:
        raise DuelNotFoundError
    if user_id not in {duel.initiator_id, duel.opponent_id}:
        raise DuelAccessError
    if duel.status != DUEL_STATUS_ACTIVE:
        raise DuelInvalidStateError
    if resolved_winner_id is not None:
        if await UsersRepo.get_by_id(session, resolved_winner_id) is None:
            raise DuelUserNotFoundError
        if resolved_winner_id not in {duel.initiator_id, duel.opponent_id}:
            raise DuelInvalidInputError("winner must be a duel participant")

    return await _complete_duel(
        session,
        duel=duel,
        winner_id=resolved_winner_id,
        initiator_score=resolved_initiator_score,
        opponent_score=resolved_opponent_score,
        now_utc=now_utc,
    )
