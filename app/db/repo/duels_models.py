from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from app.db.models.duel_results import DuelResult
from app.db.models.duels import Duel


@dataclass(frozen=True, slots=True)
class DuelListRow:
    duel: Duel
    initiator_username: str | None
    opponent_username: str | None
    test_title: str | None
    course_title: str | None
    result: DuelResult | None = None


@dataclass(frozen=True, slots=True)
class DuelResultAggregate:
    completed_total: int
    wins: int
    average_score: Decimal | None
