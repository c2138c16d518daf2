"""duel_arena_core_schema

Revision ID: 3c1d2e4f5a60
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "3c1d2e4f5a60"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("auth_id", sa.String(64), nullable=True),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("total_duels", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("duels_won", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("duels_lost", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("current_losing_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("longest_losing_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("total_duels >= 0", name="ck_users_total_duels_non_negative"),
        sa.CheckConstraint("duels_won >= 0", name="ck_users_duels_won_non_negative"),
        sa.CheckConstraint("duels_lost >= 0", name="ck_users_duels_lost_non_negative"),
        sa.CheckConstraint(
            "current_losing_streak >= 0",
            name="ck_users_current_losing_streak_non_negative",
        ),
        sa.CheckConstraint(
            "longest_losing_streak >= current_losing_streak",
            name="ck_users_longest_losing_streak_high_water",
        ),
        sa.UniqueConstraint("auth_id", name="uq_users_auth_id"),
    )
    op.create_index("idx_users_username", "users", ["username"])
    op.create_index(
        "idx_users_leaderboard",
        "users",
        ["duels_won", "current_losing_streak", "id"],
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    op.create_table(
        "topics",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("course_id", sa.BigInteger(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"]),
    )
    op.create_index("idx_topics_course", "topics", ["course_id"])

    op.create_table(
        "tests",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("difficulty_level", sa.String(16), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    op.create_table(
        "duels",
        sa.Column("duel_id", sa.BigInteger(), primary_key=True),
        sa.Column("initiator_id", sa.BigInteger(), nullable=False),
        sa.Column("opponent_id", sa.BigInteger(), nullable=False),
        sa.Column("test_id", sa.BigInteger(), nullable=True),
        sa.Column("course_id", sa.BigInteger(), nullable=True),
        sa.Column("question_count", sa.Integer(), nullable=False),
        sa.Column("branch_type", sa.String(16), nullable=False),
        sa.Column("selection_type", sa.String(16), nullable=False),
        sa.Column("branch_id", sa.BigInteger(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending','active','declined','completed')",
            name="ck_duels_status",
        ),
        sa.CheckConstraint("branch_type IN ('mixed','single')", name="ck_duels_branch_type"),
        sa.CheckConstraint(
            "selection_type IN ('random','sequential')",
            name="ck_duels_selection_type",
        ),
        sa.CheckConstraint("initiator_id <> opponent_id", name="ck_duels_distinct_participants"),
        sa.CheckConstraint(
            "(test_id IS NULL) <> (course_id IS NULL)",
            name="ck_duels_single_question_source",
        ),
        sa.CheckConstraint("question_count >= 1", name="ck_duels_question_count_positive"),
        sa.ForeignKeyConstraint(["initiator_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["opponent_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["test_id"], ["tests.id"]),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"]),
        sa.ForeignKeyConstraint(["branch_id"], ["topics.id"]),
    )
    op.create_index(
        "idx_duels_opponent_status_created",
        "duels",
        ["opponent_id", "status", "created_at"],
    )
    op.create_index(
        "idx_duels_initiator_status_created",
        "duels",
        ["initiator_id", "status", "created_at"],
    )
    op.create_index("idx_duels_branch_created", "duels", ["branch_id", "created_at"])

    op.create_table(
        "duel_results",
        sa.Column("duel_id", sa.BigInteger(), primary_key=True),
        sa.Column("winner_id", sa.BigInteger(), nullable=True),
        sa.Column("initiator_score", sa.Numeric(10, 2), nullable=False),
        sa.Column("opponent_score", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "initiator_score >= 0",
            name="ck_duel_results_initiator_score_non_negative",
        ),
        sa.CheckConstraint(
            "opponent_score >= 0",
            name="ck_duel_results_opponent_score_non_negative",
        ),
        sa.ForeignKeyConstraint(["duel_id"], ["duels.duel_id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["users.id"]),
    )
    op.create_index("idx_duel_results_winner", "duel_results", ["winner_id"])


def downgrade() -> None:
    op.drop_index("idx_duel_results_winner", table_name="duel_results")
    op.drop_table("duel_results")

    op.drop_index("idx_duels_branch_created", table_name="duels")
    op.drop_index("idx_duels_initiator_status_created", table_name="duels")
    op.drop_index("idx_duels_opponent_status_created", table_name="duels")
    op.drop_table("duels")

    op.drop_table("tests")

    op.drop_index("idx_topics_course", table_name="topics")
    op.drop_table("topics")

    op.drop_table("courses")

    op.drop_index("idx_users_leaderboard", table_name="users")
    op.drop_index("idx_users_username", table_name="users")
    op.drop_table("users")
