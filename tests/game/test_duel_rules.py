from __future__ import annotations

from decimal import Decimal

import pytest

from app.game.duels.errors import DuelInvalidInputError
from app.game.duels.rules import (
    clamp_limit,
    clamp_offset,
    format_ratio,
    format_score,
    parse_identifier,
    parse_score,
    resolve_branch_type,
    resolve_question_count,
    resolve_question_source,
    resolve_selection_type,
    resolve_winner_id,
)
from app.game.duels.types import CourseSource, QuizTestSource


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (7, 7),
        ("42", 42),
        (" 9 ", 9),
        (str(2**63 - 1), 2**63 - 1),
    ],
)
def test_parse_identifier_accepts_ints_and_digit_strings(raw: object, expected: int) -> None:
    assert parse_identifier(raw, field="opponent_id") == expected


@pytest.mark.parametrize(
    "raw",
    [
        None,
        True,
        "abc",
        "4.2",
        0,
        -3,
        1.5,
        "12\u00b3",
        "\u00b2",
        "\u0661\u0662",
        2**63,
        str(2**63),
    ],
)
def test_parse_identifier_rejects_invalid_values(raw: object) -> None:
    with pytest.raises(DuelInvalidInputError):
        parse_identifier(raw, field="opponent_id")


def test_parse_identifier_names_missing_field() -> None:
    with pytest.raises(DuelInvalidInputError, match="opponent_id is required"):
        parse_identifier(None, field="opponent_id")


def test_parse_score_normalizes_to_two_places() -> None:
    assert parse_score("80", field="initiator_score") == Decimal("80.00")
    assert parse_score(70.125, field="initiator_score") == Decimal("70.13")
    assert parse_score(Decimal("0"), field="initiator_score") == Decimal("0.00")


@pytest.mark.parametrize("raw", [None, False, "abc", "NaN", "Infinity", -1, "100000000"])
def test_parse_score_rejects_invalid_values(raw: object) -> None:
    with pytest.raises(DuelInvalidInputError):
        parse_score(raw, field="initiator_score")


def test_resolve_question_source_prefers_course() -> None:
    assert resolve_question_source(test_id=3, course_id=10) == CourseSource(course_id=10)
    assert resolve_question_source(test_id=3, course_id=None) == QuizTestSource(test_id=3)
    assert resolve_question_source(test_id=None, course_id=10) == CourseSource(course_id=10)


def test_resolve_question_source_requires_one_source() -> None:
    with pytest.raises(DuelInvalidInputError):
        resolve_question_source(test_id=None, course_id=None)


def test_resolve_question_count_uses_default_and_bounds() -> None:
    assert resolve_question_count(None, default=5, maximum=50) == 5
    assert resolve_question_count(12, default=5, maximum=50) == 12
    with pytest.raises(DuelInvalidInputError):
        resolve_question_count(0, default=5, maximum=50)
    with pytest.raises(DuelInvalidInputError):
        resolve_question_count(51, default=5, maximum=50)


def test_resolve_branch_and_selection_types() -> None:
    assert resolve_branch_type(None) == "mixed"
    assert resolve_branch_type(" Single ") == "single"
    assert resolve_selection_type("") == "random"
    assert resolve_selection_type("SEQUENTIAL") == "sequential"
    with pytest.raises(DuelInvalidInputError):
        resolve_branch_type("tree")
    with pytest.raises(DuelInvalidInputError):
        resolve_selection_type("weighted")


@pytest.mark.parametrize(
    ("initiator_score", "opponent_score", "expected"),
    [
        ("80", "60", 1),
        ("59.99", "60", 2),
        ("70.5", "70.50", None),
    ],
)
def test_resolve_winner_id(initiator_score: str, opponent_score: str, expected: int | None) -> None:
    assert (
        resolve_winner_id(
            initiator_id=1,
            opponent_id=2,
            initiator_score=Decimal(initiator_score),
            opponent_score=Decimal(opponent_score),
        )
        == expected
    )


@pytest.mark.parametrize(
    ("numerator", "denominator", "expected"),
    [
        (0, 0, "0.00"),
        (3, 0, "0.00"),
        (1, 3, "0.33"),
        (2, 3, "0.67"),
        (1, 8, "0.13"),
        (4, 4, "1.00"),
    ],
)
def test_format_ratio(numerator: int, denominator: int, expected: str) -> None:
    assert format_ratio(numerator, denominator) == expected


def test_format_score() -> None:
    assert format_score(None) == "0.00"
    assert format_score(Decimal("58.3333333")) == "58.33"
    assert format_score(Decimal("12.005")) == "12.01"


def test_clamp_limit_and_offset() -> None:
    assert clamp_limit(None, default=10, maximum=100) == 10
    assert clamp_limit(0, default=10, maximum=100) == 10
    assert clamp_limit(25, default=10, maximum=100) == 25
    assert clamp_limit(500, default=10, maximum=100) == 100
    assert clamp_offset(None) == 0
    assert clamp_offset(-5) == 0
    assert clamp_offset(20) == 20
