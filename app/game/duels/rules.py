"""Pure duel rules: input parsing, winner resolution and stat formatting."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from app.game.duels.constants import (
    BRANCH_TYPE_MIXED,
    DUEL_BRANCH_TYPES,
    DUEL_SELECTION_TYPES,
    MAX_IDENTIFIER,
    SELECTION_TYPE_RANDOM,
)
from app.game.duels.errors import DuelInvalidInputError
from app.game.duels.types import CourseSource, QuestionSource, QuizTestSource

_TWO_PLACES = Decimal("0.01")
# duel_results scores are NUMERIC(10, 2).
_MAX_SCORE = Decimal("99999999.99")


def parse_identifier(raw: object, *, field: str) -> int:
    """Accepts positive ints and digit strings, the way clients send ids in JSON bodies."""
    if raw is None or isinstance(raw, bool):
        raise DuelInvalidInputError(f"{field} is required")
    text = raw.strip() if isinstance(raw, str) else None
    if isinstance(raw, int):
        value = raw
    elif text and text.isascii() and text.isdigit():
        value = int(text)
    else:
        raise DuelInvalidInputError(f"{field} must be numeric")
    if value <= 0:
        raise DuelInvalidInputError(f"{field} must be positive")
    if value > MAX_IDENTIFIER:
        raise DuelInvalidInputError(f"{field} is out of range")
    return value


def parse_score(raw: object, *, field: str) -> Decimal:
    if raw is None or isinstance(raw, bool):
        raise DuelInvalidInputError(f"{field} is required")
    try:
        value = Decimal(str(raw))
    except InvalidOperation as exc:
        raise DuelInvalidInputError(f"{field} must be numeric") from exc
    if not value.is_finite():
        raise DuelInvalidInputError(f"{field} must be numeric")
    if value < 0:
        raise DuelInvalidInputError(f"{field} must not be negative")
    if value > _MAX_SCORE:
        raise DuelInvalidInputError(f"{field} is too large")
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def resolve_question_source(*, test_id: int | None, course_id: int | None) -> QuestionSource:
    # Course-based duels replace test-based ones; a test id is kept only when no course is given.
    if course_id is not None:
        return CourseSource(course_id=course_id)
    if test_id is not None:
        return QuizTestSource(test_id=test_id)
    raise DuelInvalidInputError("either test_id or course_id is required")


def resolve_question_count(raw: int | None, *, default: int, maximum: int) -> int:
    if raw is None:
        return default
    if raw < 1 or raw > maximum:
        raise DuelInvalidInputError(f"question_count must be between 1 and {maximum}")
    return raw


def resolve_branch_type(raw: str | None) -> str:
    if raw is None or not raw.strip():
        return BRANCH_TYPE_MIXED
    value = raw.strip().lower()
    if value not in DUEL_BRANCH_TYPES:
        raise DuelInvalidInputError(f"unsupported branch_type '{raw}'")
    return value


def resolve_selection_type(raw: str | None) -> str:
    if raw is None or not raw.strip():
        return SELECTION_TYPE_RANDOM
    value = raw.strip().lower()
    if value not in DUEL_SELECTION_TYPES:
        raise DuelInvalidInputError(f"unsupported selection_type '{raw}'")
    return value


def resolve_winner_id(
    *,
    initiator_id: int,
    opponent_id: int,
    initiator_score: Decimal,
    opponent_score: Decimal,
) -> int | None:
    if initiator_score > opponent_score:
        return initiator_id
    if opponent_score > initiator_score:
        return opponent_id
    return None


def format_ratio(numerator: int, denominator: int) -> str:
    if denominator <= 0:
        return "0.00"
    ratio = Decimal(numerator) / Decimal(denominator)
    return str(ratio.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def format_score(value: Decimal | None) -> str:
    if value is None:
        return "0.00"
    return str(Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def clamp_limit(raw: int | None, *, default: int, maximum: int) -> int:
    if raw is None or raw <= 0:
        return default
    return min(int(raw), maximum)


def clamp_offset(raw: int | None) -> int:
    if raw is None or raw < 0:
        return 0
    return int(raw)
