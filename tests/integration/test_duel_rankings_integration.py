from __future__ import annotations

from datetime import datetime

import pytest

from app.db.session import SessionLocal
from app.game.duels.errors import DuelAccessError, DuelUserNotFoundError
from app.game.duels.service import DuelService
from tests.integration.duel_fixtures import (
    UTC,
    _create_active_duel,
    _create_course,
    _create_user,
    _play_duel,
)


@pytest.mark.asyncio
async def test_leaderboard_pages_are_contiguous_slices_of_one_ordering() -> None:
    now_utc = datetime(2026, 3, 3, 10, 0, tzinfo=UTC)
    course_id = await _create_course()
    user_ids = [await _create_user(f"player_{idx:02d}") for idx in range(22)]
    idle_user_id = await _create_user("idle")

    # player i beats player i + 1 and player 0 also beats player 2
    for idx in range(len(user_ids) - 1):
        await _play_duel(
            initiator_id=user_ids[idx],
            opponent_id=user_ids[idx + 1],
            course_id=course_id,
            initiator_score="10",
            opponent_score="5",
            now_utc=now_utc,
        )
    await _play_duel(
        initiator_id=user_ids[0],
        opponent_id=user_ids[2],
        course_id=course_id,
        initiator_score="10",
        opponent_score="5",
        now_utc=now_utc,
    )

    async with SessionLocal.begin() as session:
        first_page = await DuelService.get_leaderboard(session, limit=10, offset=0)
        second_page = await DuelService.get_leaderboard(session, limit=10, offset=10)
        full = await DuelService.get_leaderboard(session, limit=100, offset=0)

    assert first_page.total == len(user_ids)
    assert [entry.rank for entry in first_page.entries] == list(range(1, 11))
    assert [entry.rank for entry in second_page.entries] == list(range(11, 21))

    first_ids = [entry.user_id for entry in first_page.entries]
    second_ids = [entry.user_id for entry in second_page.entries]
    full_ids = [entry.user_id for entry in full.entries]
    assert set(first_ids).isdisjoint(second_ids)
    assert full_ids[:20] == first_ids + second_ids
    assert idle_user_id not in full_ids

    assert full.entries[0].user_id == user_ids[0]
    assert full.entries[0].duels_won == 2
    assert full.entries[0].win_rate == "1.00"
    # last player only lost and sits at the bottom
    assert full_ids[-1] == user_ids[-1]
    for upper, lower in zip(full.entries, full.entries[1:]):
        assert (upper.duels_won, -upper.current_losing_streak) >= (
            lower.duels_won,
            -lower.current_losing_streak,
        )


@pytest.mark.asyncio
async def test_leaderboard_clamps_limit_and_offset() -> None:
    now_utc = datetime(2026, 3, 3, 11, 0, tzinfo=UTC)
    course_id = await _create_course()
    alice_id = await _create_user("alice")
    bob_id = await _create_user("bob")
    await _play_duel(
        initiator_id=alice_id,
        opponent_id=bob_id,
        course_id=course_id,
        initiator_score="1",
        opponent_score="0",
        now_utc=now_utc,
    )

    async with SessionLocal.begin() as session:
        page = await DuelService.get_leaderboard(session, limit=5000, offset=-3)
        default_page = await DuelService.get_leaderboard(session)

    assert page.limit == 100
    assert page.offset == 0
    assert [entry.user_id for entry in page.entries] == [alice_id, bob_id]
    assert default_page.limit == 10


@pytest.mark.asyncio
async def test_recommended_opponents_prefer_similar_win_counts() -> None:
    now_utc = datetime(2026, 3, 3, 12, 0, tzinfo=UTC)
    course_id = await _create_course()
    requester_id = await _create_user("requester")
    strong_id = await _create_user("strong")
    peer_id = await _create_user("peer")
    novice_id = await _create_user("novice")

    # requester and peer reach one win each, strong reaches three
    await _play_duel(
        initiator_id=requester_id,
        opponent_id=novice_id,
        course_id=course_id,
        initiator_score="9",
        opponent_score="1",
        now_utc=now_utc,
    )
    await _play_duel(
        initiator_id=peer_id,
        opponent_id=novice_id,
        course_id=course_id,
        initiator_score="9",
        opponent_score="1",
        now_utc=now_utc,
    )
    for _ in range(3):
        await _play_duel(
            initiator_id=strong_id,
            opponent_id=novice_id,
            course_id=course_id,
            initiator_score="9",
            opponent_score="1",
            now_utc=now_utc,
        )

    async with SessionLocal.begin() as session:
        candidates = await DuelService.get_recommended_opponents(session, user_id=requester_id)
        limited = await DuelService.get_recommended_opponents(
            session,
            user_id=requester_id,
            limit=1,
        )

    candidate_ids = [candidate.user_id for candidate in candidates]
    assert requester_id not in candidate_ids
    assert candidate_ids == [peer_id, novice_id, strong_id]
    assert [candidate.user_id for candidate in limited] == [peer_id]


@pytest.mark.asyncio
async def test_result_stats_aggregate_completed_duels() -> None:
    now_utc = datetime(2026, 3, 3, 13, 0, tzinfo=UTC)
    course_id = await _create_course()
    alice_id = await _create_user("alice")
    bob_id = await _create_user("bob")

    await _play_duel(
        initiator_id=alice_id,
        opponent_id=bob_id,
        course_id=course_id,
        initiator_score="80",
        opponent_score="60",
        now_utc=now_utc,
    )
    await _play_duel(
        initiator_id=bob_id,
        opponent_id=alice_id,
        course_id=course_id,
        initiator_score="90",
        opponent_score="45",
        now_utc=now_utc,
    )
    await _play_duel(
        initiator_id=alice_id,
        opponent_id=bob_id,
        course_id=course_id,
        initiator_score="50",
        opponent_score="50",
        now_utc=now_utc,
    )
    # active duels are not part of the aggregate
    await _create_active_duel(
        initiator_id=alice_id,
        opponent_id=bob_id,
        course_id=course_id,
        now_utc=now_utc,
    )

    async with SessionLocal.begin() as session:
        alice_stats = await DuelService.get_user_result_stats(session, user_id=alice_id)
        idle_stats = await DuelService.get_user_result_stats(session, user_id=4242)
        with pytest.raises(DuelUserNotFoundError):
            await DuelService.get_user_result_stats(session, user_id=4242, require_user=True)

    assert alice_stats.total_duels == 3
    assert alice_stats.wins == 1
    assert alice_stats.losses == 2
    assert alice_stats.win_rate == "0.33"
    # (80 + 45 + 50) / 3
    assert alice_stats.average_score == "58.33"
    assert idle_stats.total_duels == 0
    assert idle_stats.win_rate == "0.00"
    assert idle_stats.average_score == "0.00"


@pytest.mark.asyncio
async def test_record_result_with_explicit_winner() -> None:
    now_utc = datetime(2026, 3, 3, 14, 0, tzinfo=UTC)
    course_id = await _create_course()
    alice_id = await _create_user("alice")
    bob_id = await _create_user("bob")
    duel_id = await _create_active_duel(
        initiator_id=alice_id,
        opponent_id=bob_id,
        course_id=course_id,
        now_utc=now_utc,
    )

    async with SessionLocal.begin() as session:
        result = await DuelService.record_duel_result(
            session,
            duel_id=str(duel_id),
            user_id=alice_id,
            winner_id=bob_id,
            initiator_score="7",
            opponent_score="7",
            now_utc=now_utc,
        )
    assert result.winner_id == bob_id

    async with SessionLocal.begin() as session:
        stored = await DuelService.get_duel_result(session, duel_id=duel_id)
        bob_stats = await DuelService.get_user_duel_stats(session, user_id=bob_id)
    assert stored.winner_username == "bob"
    assert bob_stats.wins == 1
    assert bob_stats.win_rate == "1.00"


@pytest.mark.asyncio
async def test_record_result_by_outsider_is_forbidden_and_moves_nothing() -> None:
    now_utc = datetime(2026, 3, 3, 15, 0, tzinfo=UTC)
    course_id = await _create_course()
    alice_id = await _create_user("alice")
    bob_id = await _create_user("bob")
    carol_id = await _create_user("carol")
    duel_id = await _create_active_duel(
        initiator_id=alice_id,
        opponent_id=bob_id,
        course_id=course_id,
        now_utc=now_utc,
    )

    with pytest.raises(DuelAccessError):
        async with SessionLocal.begin() as session:
            await DuelService.record_duel_result(
                session,
                duel_id=duel_id,
                user_id=carol_id,
                winner_id=bob_id,
                initiator_score="0",
                opponent_score="10",
                now_utc=now_utc,
            )

    async with SessionLocal.begin() as session:
        active = await DuelService.list_active_duels(session, user_id=alice_id)
        alice_stats = await DuelService.get_user_duel_stats(session, user_id=alice_id)
        bob_stats = await DuelService.get_user_duel_stats(session, user_id=bob_id)
    assert [duel.duel_id for duel in active] == [duel_id]
    assert alice_stats.total_duels == 0
    assert bob_stats.total_duels == 0
    assert bob_stats.wins == 0
