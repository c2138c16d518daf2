from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class QuizTestSource:
    test_id: int


@dataclass(frozen=True, slots=True)
class CourseSource:
    course_id: int


QuestionSource = QuizTestSource | CourseSource


@dataclass(slots=True)
class DuelSnapshot:
    duel_id: int
    initiator_id: int
    opponent_id: int
    test_id: int | None
    course_id: int | None
    question_count: int
    branch_type: str
    selection_type: str
    branch_id: int | None
    status: str
    created_at: datetime
    start_time: datetime | None = None
    end_time: datetime | None = None
    initiator_username: str | None = None
    opponent_username: str | None = None
    test_title: str | None = None
    course_title: str | None = None


@dataclass(slots=True)
class DuelResultSnapshot:
    duel_id: int
    winner_id: int | None
    initiator_score: Decimal
    opponent_score: Decimal
    created_at: datetime
    winner_username: str | None = None

    @property
    def is_draw(self) -> bool:
        return self.winner_id is None


@dataclass(slots=True)
class CompletedDuelSnapshot:
    duel: DuelSnapshot
    result: DuelResultSnapshot | None
    is_winner: bool


@dataclass(slots=True)
class DuelDetails:
    duel: DuelSnapshot
    result: DuelResultSnapshot | None


@dataclass(slots=True)
class UserDuelStats:
    user_id: int
    total_duels: int
    wins: int
    losses: int
    current_losing_streak: int
    longest_losing_streak: int
    win_rate: str


@dataclass(slots=True)
class DuelResultStats:
    user_id: int
    wins: int
    losses: int
    total_duels: int
    win_rate: str
    average_score: str


@dataclass(slots=True)
class LeaderboardEntry:
    rank: int
    user_id: int
    username: str
    total_duels: int
    duels_won: int
    duels_lost: int
    current_losing_streak: int
    longest_losing_streak: int
    win_rate: str


@dataclass(slots=True)
class LeaderboardPage:
    entries: list[LeaderboardEntry]
    total: int
    limit: int
    offset: int


@dataclass(slots=True)
class OpponentCandidate:
    user_id: int
    username: str
    total_duels: int
    duels_won: int
    win_rate: str
