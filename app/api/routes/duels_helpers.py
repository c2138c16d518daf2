from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from fastapi import HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal
from app.game.duels.errors import (
    DuelAccessError,
    DuelBranchNotFoundError,
    DuelCourseNotFoundError,
    DuelError,
    DuelInvalidInputError,
    DuelInvalidStateError,
    DuelNotFoundError,
    DuelOpponentNotFoundError,
    DuelTestNotFoundError,
    DuelUserNotFoundError,
)
from app.game.duels.types import (
    CompletedDuelSnapshot,
    DuelResultSnapshot,
    DuelResultStats,
    DuelSnapshot,
)
from app.services.user_auth import (
    UserAuthError,
    decode_access_token,
    extract_bearer_token,
    extract_subject,
)

from .duels_models import (
    CompletedDuelResponse,
    DuelResponse,
    DuelResultResponse,
    DuelResultStatsResponse,
)

logger = structlog.get_logger(__name__)

_NOT_FOUND_CODES: tuple[tuple[type[DuelNotFoundError], str], ...] = (
    (DuelOpponentNotFoundError, "E_OPPONENT_NOT_FOUND"),
    (DuelTestNotFoundError, "E_TEST_NOT_FOUND"),
    (DuelCourseNotFoundError, "E_COURSE_NOT_FOUND"),
    (DuelBranchNotFoundError, "E_BRANCH_NOT_FOUND"),
    (DuelUserNotFoundError, "E_USER_NOT_FOUND"),
)


def _auth_failed(request: Request, *, code: str, reason: str) -> HTTPException:
    logger.warning("duel_auth_failed", reason=reason, path=request.url.path)
    return HTTPException(status_code=401, detail={"code": code})


async def _resolve_request_user_id(request: Request) -> int:
    token = extract_bearer_token(request)
    if token is None:
        raise _auth_failed(request, code="E_AUTH_REQUIRED", reason="token_missing")

    settings = get_settings()
    try:
        claims = decode_access_token(
            token,
            secret=settings.auth_jwt_secret,
            algorithm=settings.auth_jwt_algorithm,
            audience=settings.auth_jwt_audience,
        )
        auth_id = extract_subject(claims)
    except UserAuthError as exc:
        raise _auth_failed(request, code=exc.code, reason=exc.reason) from exc

    with _translate_duel_errors("resolve_user"):
        async with SessionLocal() as session:
            user = await UsersRepo.get_by_auth_id(session, auth_id)
    if user is None:
        raise _auth_failed(request, code="E_USER_NOT_FOUND", reason="user_not_found")
    return int(user.id)


def _as_http_exception(exc: DuelError) -> HTTPException:
    if isinstance(exc, DuelInvalidInputError):
        return HTTPException(
            status_code=400,
            detail={"code": "E_INVALID_INPUT", "message": str(exc)},
        )
    if isinstance(exc, DuelInvalidStateError):
        return HTTPException(status_code=400, detail={"code": "E_INVALID_STATE"})
    if isinstance(exc, DuelAccessError):
        return HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})
    for error_type, code in _NOT_FOUND_CODES:
        if isinstance(exc, error_type):
            return HTTPException(status_code=404, detail={"code": code})
    return HTTPException(status_code=404, detail={"code": "E_NOT_FOUND"})


@contextmanager
def _translate_duel_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except DuelError as exc:
        raise _as_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception("duel_request_failed", operation=operation)
        raise HTTPException(status_code=500, detail={"code": "E_INTERNAL"}) from exc


def _duel_as_response(duel: DuelSnapshot) -> DuelResponse:
    return DuelResponse(
        duel_id=duel.duel_id,
        initiator_id=duel.initiator_id,
        opponent_id=duel.opponent_id,
        test_id=duel.test_id,
        course_id=duel.course_id,
        question_count=duel.question_count,
        branch_type=duel.branch_type,
        selection_type=duel.selection_type,
        branch_id=duel.branch_id,
        status=duel.status,
        created_at=duel.created_at,
        start_time=duel.start_time,
        end_time=duel.end_time,
        initiator_username=duel.initiator_username,
        opponent_username=duel.opponent_username,
        test_title=duel.test_title,
        course_title=duel.course_title,
    )


def _result_as_response(result: DuelResultSnapshot) -> DuelResultResponse:
    return DuelResultResponse(
        duel_id=result.duel_id,
        winner_id=result.winner_id,
        winner_username=result.winner_username,
        initiator_score=float(result.initiator_score),
        opponent_score=float(result.opponent_score),
        is_draw=result.is_draw,
        created_at=result.created_at,
    )


def _completed_as_response(item: CompletedDuelSnapshot) -> CompletedDuelResponse:
    base = _duel_as_response(item.duel).model_dump()
    result = item.result
    return CompletedDuelResponse(
        **base,
        winner_id=result.winner_id if result is not None else None,
        initiator_score=float(result.initiator_score) if result is not None else None,
        opponent_score=float(result.opponent_score) if result is not None else None,
        is_winner=item.is_winner,
    )


def _result_stats_as_response(stats: DuelResultStats) -> DuelResultStatsResponse:
    return DuelResultStatsResponse(
        user_id=stats.user_id,
        wins=stats.wins,
        losses=stats.losses,
        total_duels=stats.total_duels,
        win_rate=stats.win_rate,
        average_score=stats.average_score,
    )
