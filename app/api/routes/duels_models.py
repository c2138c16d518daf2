from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from fastapi import Path
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.game.duels.constants import MAX_IDENTIFIER

EntityIdPath = Annotated[int, Path(gt=0, le=MAX_IDENTIFIER)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DuelChallengeRequest(CamelModel):
    opponent_id: int | str | None = None
    test_id: int | None = Field(default=None, gt=0, le=MAX_IDENTIFIER)
    course_id: int | None = Field(default=None, gt=0, le=MAX_IDENTIFIER)
    question_count: int | None = None
    branch_type: str | None = Field(default=None, max_length=16)
    selection_type: str | None = Field(default=None, max_length=16)
    branch_id: int | None = Field(default=None, gt=0, le=MAX_IDENTIFIER)


class DuelSubmitResultRequest(CamelModel):
    initiator_score: Decimal | None = None
    opponent_score: Decimal | None = None


class DuelRecordResultRequest(CamelModel):
    duel_id: int | str | None = None
    winner_id: int | str | None = None
    initiator_score: Decimal | None = None
    opponent_score: Decimal | None = None


class DuelResponse(CamelModel):
    duel_id: int
    initiator_id: int
    opponent_id: int
    test_id: int | None = None
    course_id: int | None = None
    question_count: int
    branch_type: str
    selection_type: str
    branch_id: int | None = None
    status: str
    created_at: datetime
    start_time: datetime | None = None
    end_time: datetime | None = None
    initiator_username: str | None = None
    opponent_username: str | None = None
    test_title: str | None = None
    course_title: str | None = None


class DuelResultResponse(CamelModel):
    duel_id: int
    winner_id: int | None = None
    winner_username: str | None = None
    initiator_score: float
    opponent_score: float
    is_draw: bool
    created_at: datetime


class CompletedDuelResponse(DuelResponse):
    winner_id: int | None = None
    initiator_score: float | None = None
    opponent_score: float | None = None
    is_winner: bool


class DuelChallengeResponse(CamelModel):
    message: str
    duel: DuelResponse


class DuelAcceptResponse(CamelModel):
    message: str
    duel: DuelResponse


class DuelMessageResponse(CamelModel):
    message: str


class DuelSubmitResultResponse(CamelModel):
    message: str
    result: DuelResultResponse


class DuelDetailsResponse(CamelModel):
    duel: DuelResponse
    result: DuelResultResponse | None = None


class UserDuelStatsResponse(CamelModel):
    user_id: int
    total_duels: int = Field(ge=0)
    wins: int = Field(ge=0)
    losses: int = Field(ge=0)
    current_losing_streak: int = Field(ge=0)
    longest_losing_streak: int = Field(ge=0)
    win_rate: str


class DuelResultStatsResponse(CamelModel):
    user_id: int
    wins: int = Field(ge=0)
    losses: int = Field(ge=0)
    total_duels: int = Field(ge=0)
    win_rate: str
    average_score: str


class LeaderboardEntryResponse(CamelModel):
    rank: int = Field(ge=1)
    id: int
    username: str
    total_duels: int = Field(ge=0)
    duels_won: int = Field(ge=0)
    duels_lost: int = Field(ge=0)
    current_losing_streak: int = Field(ge=0)
    longest_losing_streak: int = Field(ge=0)
    win_rate: str


class LeaderboardResponse(CamelModel):
    leaderboard: list[LeaderboardEntryResponse]
    total: int = Field(ge=0)
    limit: int = Field(ge=1)
    offset: int = Field(ge=0)


class OpponentCandidateResponse(CamelModel):
    id: int
    username: str
    total_duels: int = Field(ge=0)
    duels_won: int = Field(ge=0)
    win_rate: str
