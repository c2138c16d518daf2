from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request, status

from app.db.session import SessionLocal
from app.game.duels.service import DuelService

from .duels_helpers import (
    _resolve_request_user_id,
    _result_as_response,
    _result_stats_as_response,
    _translate_duel_errors,
)
from .duels_models import (
    DuelRecordResultRequest,
    DuelResultResponse,
    DuelResultStatsResponse,
    DuelSubmitResultResponse,
    EntityIdPath,
)

router = APIRouter(prefix="/api/duel-results", tags=["duels"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def record_duel_result(
    *,
    payload: DuelRecordResultRequest,
    request: Request,
) -> DuelSubmitResultResponse:
    user_id = await _resolve_request_user_id(request)
    now_utc = datetime.now(timezone.utc)
    with _translate_duel_errors("record_result"):
        async with SessionLocal.begin() as session:
            result = await DuelService.record_duel_result(
                session,
                duel_id=payload.duel_id,
                user_id=user_id,
                winner_id=payload.winner_id,
                initiator_score=payload.initiator_score,
                opponent_score=payload.opponent_score,
                now_utc=now_utc,
            )
    return DuelSubmitResultResponse(
        message="Duel result recorded successfully",
        result=_result_as_response(result),
    )


@router.get("/stats/user")
async def get_own_result_stats(request: Request) -> DuelResultStatsResponse:
    user_id = await _resolve_request_user_id(request)
    with _translate_duel_errors("result_stats"):
        async with SessionLocal.begin() as session:
            stats = await DuelService.get_user_result_stats(session, user_id=user_id)
    return _result_stats_as_response(stats)


@router.get("/stats/user/{user_id}")
async def get_user_result_stats(user_id: EntityIdPath, request: Request) -> DuelResultStatsResponse:
    await _resolve_request_user_id(request)
    with _translate_duel_errors("result_stats"):
        async with SessionLocal.begin() as session:
            stats = await DuelService.get_user_result_stats(
                session,
                user_id=user_id,
                require_user=True,
            )
    return _result_stats_as_response(stats)


@router.get("/{duel_id}")
async def get_duel_result(duel_id: EntityIdPath, request: Request) -> DuelResultResponse:
    await _resolve_request_user_id(request)
    with _translate_duel_errors("get_result"):
        async with SessionLocal.begin() as session:
            result = await DuelService.get_duel_result(session, duel_id=duel_id)
    return _result_as_response(result)
