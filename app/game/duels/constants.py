from __future__ import annotations

DUEL_STATUS_PENDING = "pending"
DUEL_STATUS_ACTIVE = "active"
DUEL_STATUS_DECLINED = "declined"
DUEL_STATUS_COMPLETED = "completed"

BRANCH_TYPE_MIXED = "mixed"
BRANCH_TYPE_SINGLE = "single"
DUEL_BRANCH_TYPES: frozenset[str] = frozenset({BRANCH_TYPE_MIXED, BRANCH_TYPE_SINGLE})

SELECTION_TYPE_RANDOM = "random"
SELECTION_TYPE_SEQUENTIAL = "sequential"
DUEL_SELECTION_TYPES: frozenset[str] = frozenset({SELECTION_TYPE_RANDOM, SELECTION_TYPE_SEQUENTIAL})

LEADERBOARD_DEFAULT_LIMIT = 10
RECOMMENDED_OPPONENTS_DEFAULT_LIMIT = 5
RECOMMENDED_OPPONENTS_MAX_LIMIT = 50

# Ids are BIGINT columns.
MAX_IDENTIFIER = 2**63 - 1
