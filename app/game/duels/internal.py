from __future__ import annotations

from decimal import Decimal

from app.db.models.duel_results import DuelResult
from app.db.models.duels import Duel
from app.db.models.users import User
from app.db.repo.duels_models import DuelListRow
from app.game.duels.rules import format_ratio
from app.game.duels.types import DuelResultSnapshot, DuelSnapshot, UserDuelStats


def build_duel_snapshot(duel: Duel) -> DuelSnapshot:
    return DuelSnapshot(
        duel_id=int(duel.duel_id),
        initiator_id=int(duel.initiator_id),
        opponent_id=int(duel.opponent_id),
        test_id=int(duel.test_id) if duel.test_id is not None else None,
        course_id=int(duel.course_id) if duel.course_id is not None else None,
        question_count=int(duel.question_count),
        branch_type=str(duel.branch_type),
        selection_type=str(duel.selection_type),
        branch_id=int(duel.branch_id) if duel.branch_id is not None else None,
        status=str(duel.status),
        created_at=duel.created_at,
        start_time=duel.start_time,
        end_time=duel.end_time,
    )


def build_duel_snapshot_from_row(row: DuelListRow) -> DuelSnapshot:
    snapshot = build_duel_snapshot(row.duel)
    snapshot.initiator_username = row.initiator_username
    snapshot.opponent_username = row.opponent_username
    snapshot.test_title = row.test_title
    snapshot.course_title = row.course_title
    return snapshot


def build_result_snapshot(
    duel_result: DuelResult,
    *,
    winner_username: str | None = None,
) -> DuelResultSnapshot:
    return DuelResultSnapshot(
        duel_id=int(duel_result.duel_id),
        winner_id=int(duel_result.winner_id) if duel_result.winner_id is not None else None,
        initiator_score=Decimal(duel_result.initiator_score),
        opponent_score=Decimal(duel_result.opponent_score),
        created_at=duel_result.created_at,
        winner_username=winner_username,
    )


def build_user_duel_stats(*, user_id: int, user: User | None) -> UserDuelStats:
    if user is None:
        return UserDuelStats(
            user_id=user_id,
            total_duels=0,
            wins=0,
            losses=0,
            current_losing_streak=0,
            longest_losing_streak=0,
            win_rate=format_ratio(0, 0),
        )
    return UserDuelStats(
        user_id=user_id,
        total_duels=int(user.total_duels),
        wins=int(user.duels_won),
        losses=int(user.duels_lost),
        current_losing_streak=int(user.current_losing_streak),
        longest_losing_streak=int(user.longest_losing_streak),
        win_rate=format_ratio(int(user.duels_won), int(user.total_duels)),
    )
