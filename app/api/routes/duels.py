from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Query, Request, status

from app.db.session import SessionLocal
from app.game.duels.constants import MAX_IDENTIFIER
from app.game.duels.service import DuelService

from .duels_helpers import (
    _completed_as_response,
    _duel_as_response,
    _resolve_request_user_id,
    _result_as_response,
    _translate_duel_errors,
)
from .duels_models import (
    CompletedDuelResponse,
    DuelAcceptResponse,
    DuelChallengeRequest,
    DuelChallengeResponse,
    DuelDetailsResponse,
    DuelMessageResponse,
    DuelResponse,
    DuelSubmitResultRequest,
    DuelSubmitResultResponse,
    EntityIdPath,
    LeaderboardEntryResponse,
    LeaderboardResponse,
    OpponentCandidateResponse,
    UserDuelStatsResponse,
)

router = APIRouter(prefix="/api/duels", tags=["duels"])


@router.post("/challenge", status_code=status.HTTP_201_CREATED)
async def challenge_user(
    *,
    payload: DuelChallengeRequest,
    request: Request,
) -> DuelChallengeResponse:
    user_id = await _resolve_request_user_id(request)
    now_utc = datetime.now(timezone.utc)
    with _translate_duel_errors("challenge"):
        async with SessionLocal.begin() as session:
            duel = await DuelService.challenge_user(
                session,
                initiator_id=user_id,
                opponent_id=payload.opponent_id,
                now_utc=now_utc,
                test_id=payload.test_id,
                course_id=payload.course_id,
                question_count=payload.question_count,
                branch_type=payload.branch_type,
                selection_type=payload.selection_type,
                branch_id=payload.branch_id,
            )
    return DuelChallengeResponse(
        message="Duel challenge sent successfully",
        duel=_duel_as_response(duel),
    )


@router.get("/pending")
async def list_pending_duels(request: Request) -> list[DuelResponse]:
    user_id = await _resolve_request_user_id(request)
    with _translate_duel_errors("list_pending"):
        async with SessionLocal.begin() as session:
            duels = await DuelService.list_pending_duels(session, user_id=user_id)
    return [_duel_as_response(duel) for duel in duels]


@router.get("/active")
async def list_active_duels(request: Request) -> list[DuelResponse]:
    user_id = await _resolve_request_user_id(request)
    with _translate_duel_errors("list_active"):
        async with SessionLocal.begin() as session:
            duels = await DuelService.list_active_duels(session, user_id=user_id)
    return [_duel_as_response(duel) for duel in duels]


@router.get("/completed")
async def list_completed_duels(request: Request) -> list[CompletedDuelResponse]:
    user_id = await _resolve_request_user_id(request)
    with _translate_duel_errors("list_completed"):
        async with SessionLocal.begin() as session:
            completed = await DuelService.list_completed_duels(session, user_id=user_id)
    return [_completed_as_response(item) for item in completed]


@router.get("/stats/user")
async def get_user_duel_stats(request: Request) -> UserDuelStatsResponse:
    user_id = await _resolve_request_user_id(request)
    with _translate_duel_errors("user_stats"):
        async with SessionLocal.begin() as session:
            stats = await DuelService.get_user_duel_stats(session, user_id=user_id)
    return UserDuelStatsResponse(
        user_id=stats.user_id,
        total_duels=stats.total_duels,
        wins=stats.wins,
        losses=stats.losses,
        current_losing_streak=stats.current_losing_streak,
        longest_losing_streak=stats.longest_losing_streak,
        win_rate=stats.win_rate,
    )


@router.get("/leaderboard")
async def get_leaderboard(
    request: Request,
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None, le=MAX_IDENTIFIER),
) -> LeaderboardResponse:
    await _resolve_request_user_id(request)
    with _translate_duel_errors("leaderboard"):
        async with SessionLocal.begin() as session:
            page = await DuelService.get_leaderboard(session, limit=limit, offset=offset)
    return LeaderboardResponse(
        leaderboard=[
            LeaderboardEntryResponse(
                rank=entry.rank,
                id=entry.user_id,
                username=entry.username,
                total_duels=entry.total_duels,
                duels_won=entry.duels_won,
                duels_lost=entry.duels_lost,
                current_losing_streak=entry.current_losing_streak,
                longest_losing_streak=entry.longest_losing_streak,
                win_rate=entry.win_rate,
            )
            for entry in page.entries
        ],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/recommended-opponents")
async def get_recommended_opponents(
    request: Request,
    limit: int | None = Query(default=None),
) -> list[OpponentCandidateResponse]:
    user_id = await _resolve_request_user_id(request)
    with _translate_duel_errors("recommended_opponents"):
        async with SessionLocal.begin() as session:
            candidates = await DuelService.get_recommended_opponents(
                session,
                user_id=user_id,
                limit=limit,
            )
    return [
        OpponentCandidateResponse(
            id=candidate.user_id,
            username=candidate.username,
            total_duels=candidate.total_duels,
            duels_won=candidate.duels_won,
            win_rate=candidate.win_rate,
        )
        for candidate in candidates
    ]


@router.get("/branch/{branch_id}")
async def list_branch_duels(branch_id: EntityIdPath, request: Request) -> list[DuelResponse]:
    await _resolve_request_user_id(request)
    with _translate_duel_errors("list_branch"):
        async with SessionLocal.begin() as session:
            duels = await DuelService.list_branch_duels(session, branch_id=branch_id)
    return [_duel_as_response(duel) for duel in duels]


@router.get("/{duel_id}")
async def get_duel_details(duel_id: EntityIdPath, request: Request) -> DuelDetailsResponse:
    await _resolve_request_user_id(request)
    with _translate_duel_errors("details"):
        async with SessionLocal.begin() as session:
            details = await DuelService.get_duel_details(session, duel_id=duel_id)
    return DuelDetailsResponse(
        duel=_duel_as_response(details.duel),
        result=_result_as_response(details.result) if details.result is not None else None,
    )


@router.post("/{duel_id}/accept")
async def accept_duel(duel_id: EntityIdPath, request: Request) -> DuelAcceptResponse:
    user_id = await _resolve_request_user_id(request)
    now_utc = datetime.now(timezone.utc)
    with _translate_duel_errors("accept"):
        async with SessionLocal.begin() as session:
            duel = await DuelService.accept_duel(
                session,
                duel_id=duel_id,
                user_id=user_id,
                now_utc=now_utc,
            )
    return DuelAcceptResponse(
        message="Duel accepted successfully",
        duel=_duel_as_response(duel),
    )


@router.post("/{duel_id}/decline")
async def decline_duel(duel_id: EntityIdPath, request: Request) -> DuelMessageResponse:
    user_id = await _resolve_request_user_id(request)
    now_utc = datetime.now(timezone.utc)
    with _translate_duel_errors("decline"):
        async with SessionLocal.begin() as session:
            await DuelService.decline_duel(
                session,
                duel_id=duel_id,
                user_id=user_id,
                now_utc=now_utc,
            )
    return DuelMessageResponse(message="Duel declined successfully")


@router.post("/{duel_id}/result")
async def submit_duel_result(
    *,
    duel_id: EntityIdPath,
    payload: DuelSubmitResultRequest,
    request: Request,
) -> DuelSubmitResultResponse:
    user_id = await _resolve_request_user_id(request)
    now_utc = datetime.now(timezone.utc)
    with _translate_duel_errors("submit_result"):
        async with SessionLocal.begin() as session:
            result = await DuelService.submit_duel_result(
                session,
                duel_id=duel_id,
                user_id=user_id,
                initiator_score=payload.initiator_score,
                opponent_score=payload.opponent_score,
                now_utc=now_utc,
            )
    return DuelSubmitResultResponse(
        message="Duel result submitted successfully",
        result=_result_as_response(result),
    )
