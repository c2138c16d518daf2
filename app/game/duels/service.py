from __future__ import annotations

from app.game.duels.lifecycle import accept_duel, challenge_user, decline_duel
from app.game.duels.queries import (
    get_duel_details,
    get_duel_result,
    get_leaderboard,
    get_recommended_opponents,
    get_user_duel_stats,
    get_user_result_stats,
    list_active_duels,
    list_branch_duels,
    list_completed_duels,
    list_pending_duels,
)
from app.game.duels.results import record_duel_result, submit_duel_result


class DuelService:
    challenge_user = staticmethod(challenge_user)
    accept_duel = staticmethod(accept_duel)
    decline_duel = staticmethod(decline_duel)
    submit_duel_result = staticmethod(submit_duel_result)
    record_duel_result = staticmethod(record_duel_result)

    list_pending_duels = staticmethod(list_pending_duels)
    list_active_duels = staticmethod(list_active_duels)
    list_completed_duels = staticmethod(list_completed_duels)
    list_branch_duels = staticmethod(list_branch_duels)
    get_duel_details = staticmethod(get_duel_details)
    get_duel_result = staticmethod(get_duel_result)
    get_user_duel_stats = staticmethod(get_user_duel_stats)
    get_user_result_stats = staticmethod(get_user_result_stats)
    get_leaderboard = staticmethod(get_leaderboard)
    get_recommended_opponents = staticmethod(get_recommended_opponents)
