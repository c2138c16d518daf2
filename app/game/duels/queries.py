from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.repo.catalog_repo import CatalogRepo
from app.db.repo.duel_results_repo import DuelResultsRepo
from app.db.repo.duels_repo import DuelsRepo
from app.db.repo.users_repo import UsersRepo
from app.game.duels.constants import (
    DUEL_STATUS_ACTIVE,
    DUEL_STATUS_COMPLETED,
    DUEL_STATUS_PENDING,
    LEADERBOARD_DEFAULT_LIMIT,
    RECOMMENDED_OPPONENTS_DEFAULT_LIMIT,
    RECOMMENDED_OPPONENTS_MAX_LIMIT,
)
from app.game.duels.errors import (
    DuelBranchNotFoundError,
    DuelNotFoundError,
    DuelResultNotFoundError,
    DuelUserNotFoundError,
)
from app.game.duels.internal import (
    build_duel_snapshot_from_row,
    build_result_snapshot,
    build_user_duel_stats,
)
from app.game.duels.rules import clamp_limit, clamp_offset, format_ratio, format_score
from app.game.duels.types import (
    CompletedDuelSnapshot,
    DuelDetails,
    DuelResultSnapshot,
    DuelResultStats,
    DuelSnapshot,
    LeaderboardEntry,
    LeaderboardPage,
    OpponentCandidate,
    UserDuelStats,
)


async def list_pending_duels(session: AsyncSession, *, user_id: int) -> list[DuelSnapshot]:
    rows = await DuelsRepo.list_pending_for_opponent(
        session,
        user_id=user_id,
        status=DUEL_STATUS_PENDING,
    )
    return [build_duel_snapshot_from_row(row) for row in rows]


async def list_active_duels(session: AsyncSession, *, user_id: int) -> list[DuelSnapshot]:
    rows = await DuelsRepo.list_for_participant(
        session,
        user_id=user_id,
        status=DUEL_STATUS_ACTIVE,
    )
    return [build_duel_snapshot_from_row(row) for row in rows]


async def list_completed_duels(
    session: AsyncSession,
    *,
    user_id: int,
) -> list[CompletedDuelSnapshot]:
    rows = await DuelsRepo.list_completed_with_results(
        session,
        user_id=user_id,
        status=DUEL_STATUS_COMPLETED,
    )
    completed: list[CompletedDuelSnapshot] = []
    for row in rows:
        result = build_result_snapshot(row.result) if row.result is not None else None
        completed.append(
            CompletedDuelSnapshot(
                duel=build_duel_snapshot_from_row(row),
                result=result,
                is_winner=result is not None and result.winner_id == user_id,
            )
        )
    return completed


async def list_branch_duels(session: AsyncSession, *, branch_id: int) -> list[DuelSnapshot]:
    if await CatalogRepo.get_topic_by_id(session, branch_id) is None:
        raise DuelBranchNotFoundError
    rows = await DuelsRepo.list_by_branch(session, branch_id=branch_id)
    return [build_duel_snapshot_from_row(row) for row in rows]


async def _load_result_snapshot(
    session: AsyncSession,
    *,
    duel_id: int,
) -> DuelResultSnapshot | None:
    loaded = await DuelResultsRepo.get_with_winner_username(session, duel_id)
    if loaded is None:
        return None
    duel_result, winner_username = loaded
    return build_result_snapshot(duel_result, winner_username=winner_username)


async def get_duel_details(session: AsyncSession, *, duel_id: int) -> DuelDetails:
    row = await DuelsRepo.get_row_by_id(session, duel_id)
    if row is None:
        raise DuelNotFoundError
    result = None
    if row.duel.status == DUEL_STATUS_COMPLETED:
        result = await _load_result_snapshot(session, duel_id=duel_id)
    return DuelDetails(duel=build_duel_snapshot_from_row(row), result=result)


async def get_duel_result(session: AsyncSession, *, duel_id: int) -> DuelResultSnapshot:
    if await DuelsRepo.get_by_id(session, duel_id) is None:
        raise DuelNotFoundError
    result = await _load_result_snapshot(session, duel_id=duel_id)
    if result is None:
        raise DuelResultNotFoundError
    return result


async def get_user_duel_stats(session: AsyncSession, *, user_id: int) -> UserDuelStats:
    user = await UsersRepo.get_by_id(session, user_id)
    return build_user_duel_stats(user_id=user_id, user=user)


async def get_user_result_stats(
    session: AsyncSession,
    *,
    user_id: int,
    require_user: bool = False,
) -> DuelResultStats:
    if require_user and await UsersRepo.get_by_id(session, user_id) is None:
        raise DuelUserNotFoundError
    aggregate = await DuelResultsRepo.aggregate_for_user(
        session,
        user_id=user_id,
        completed_status=DUEL_STATUS_COMPLETED,
    )
    # Draws have no winner, so they are counted with the losses here.
    losses = aggregate.completed_total - aggregate.wins
    return DuelResultStats(
        user_id=user_id,
        wins=aggregate.wins,
        losses=losses,
        total_duels=aggregate.completed_total,
        win_rate=format_ratio(aggregate.wins, aggregate.completed_total),
        average_score=format_score(aggregate.average_score),
    )


async def get_leaderboard(
    session: AsyncSession,
    *,
    limit: int | None = None,
    offset: int | None = None,
) -> LeaderboardPage:
    resolved_limit = clamp_limit(
        limit,
        default=LEADERBOARD_DEFAULT_LIMIT,
        maximum=get_settings().duel_leaderboard_max_limit,
    )
    resolved_offset = clamp_offset(offset)
    users = await UsersRepo.list_ranked(session, limit=resolved_limit, offset=resolved_offset)
    total = await UsersRepo.count_ranked(session)
    entries = [
        LeaderboardEntry(
            rank=resolved_offset + position + 1,
            user_id=int(user.id),
            username=user.username,
            total_duels=int(user.total_duels),
            duels_won=int(user.duels_won),
            duels_lost=int(user.duels_lost),
            current_losing_streak=int(user.current_losing_streak),
            longest_losing_streak=int(user.longest_losing_streak),
            win_rate=format_ratio(int(user.duels_won), int(user.total_duels)),
        )
        for position, user in enumerate(users)
    ]
    return LeaderboardPage(
        entries=entries,
        total=total,
        limit=resolved_limit,
        offset=resolved_offset,
    )


async def get_recommended_opponents(
    session: AsyncSession,
    *,
    user_id: int,
    limit: int | None = None,
) -> list[OpponentCandidate]:
    resolved_limit = clamp_limit(
        limit,
        default=RECOMMENDED_OPPONENTS_DEFAULT_LIMIT,
        maximum=RECOMMENDED_OPPONENTS_MAX_LIMIT,
    )
    requester = await UsersRepo.get_by_id(session, user_id)
    reference_wins = int(requester.duels_won) if requester is not None else 0
    candidates = await UsersRepo.list_opponent_candidates(
        session,
        user_id=user_id,
        reference_wins=reference_wins,
        limit=resolved_limit,
    )
    return [
        OpponentCandidate(
            user_id=int(candidate.id),
            username=candidate.username,
            total_duels=int(candidate.total_duels),
            duels_won=int(candidate.duels_won),
            win_rate=format_ratio(int(candidate.duels_won), int(candidate.total_duels)),
        )
        for candidate in candidates
    ]
