"""initial pool settlement schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "rounds",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("product", sa.String(length=20), nullable=False),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("entry_fee", sa.Integer(), nullable=False),
        sa.Column("admin_fee_percent", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column("previous_accumulated", sa.Integer(), nullable=False),
        sa.Column("allow_draws", sa.Boolean(), nullable=False),
        sa.Column("featured_team", sa.String(length=255), nullable=True),
        sa.Column("winning_points", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("ruleset_version", sa.String(length=50), nullable=True),
        sa.Column("previous_round_id", ID_TYPE, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["previous_round_id"],
            ["rounds.id"],
            name=op.f("fk_rounds_previous_round_id_rounds"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_rounds")),
    )
    op.create_index(op.f("ix_rounds_id"), "rounds", ["id"], unique=False)

    op.create_table(
        "fixtures",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("round_id", ID_TYPE, nullable=False),
        sa.Column("kind", sa.String(length=10), nullable=False),
        sa.Column("stage", sa.String(length=50), nullable=True),
        sa.Column("group_name", sa.String(length=20), nullable=True),
        sa.Column("home_team", sa.String(length=255), nullable=True),
        sa.Column("away_team", sa.String(length=255), nullable=True),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("correct_option", sa.String(length=255), nullable=True),
        sa.Column("is_finished", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["round_id"],
            ["rounds.id"],
            name=op.f("fk_fixtures_round_id_rounds"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_fixtures")),
    )
    op.create_index(op.f("ix_fixtures_id"), "fixtures", ["id"], unique=False)
    op.create_index(op.f("ix_fixtures_round_id"), "fixtures", ["round_id"], unique=False)

    op.create_table(
        "entries",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("round_id", ID_TYPE, nullable=False),
        sa.Column("participant_id", sa.String(length=64), nullable=False),
        sa.Column("entry_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False),
        sa.Column("exact_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["round_id"],
            ["rounds.id"],
            name=op.f("fk_entries_round_id_rounds"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_entries")),
        sa.UniqueConstraint(
            "round_id", "participant_id", "entry_number", name="uq_entry_per_participant"
        ),
    )
    op.create_index(op.f("ix_entries_id"), "entries", ["id"], unique=False)
    op.create_index(op.f("ix_entries_round_id"), "entries", ["round_id"], unique=False)
    op.create_index(
        op.f("ix_entries_participant_id"), "entries", ["participant_id"], unique=False
    )

    op.create_table(
        "predictions",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("fixture_id", ID_TYPE, nullable=False),
        sa.Column("entry_id", ID_TYPE, nullable=False),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("selected_option", sa.String(length=255), nullable=True),
        sa.Column("points", sa.Integer(), nullable=True),
        sa.Column("outcome_tag", sa.String(length=30), nullable=True),
        sa.Column("scored_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["entry_id"],
            ["entries.id"],
            name=op.f("fk_predictions_entry_id_entries"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["fixture_id"],
            ["fixtures.id"],
            name=op.f("fk_predictions_fixture_id_fixtures"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_predictions")),
        sa.UniqueConstraint("fixture_id", "entry_id", name="uq_prediction_per_entry"),
    )
    op.create_index(op.f("ix_predictions_id"), "predictions", ["id"], unique=False)
    op.create_index(
        op.f("ix_predictions_fixture_id"), "predictions", ["fixture_id"], unique=False
    )
    op.create_index(
        op.f("ix_predictions_entry_id"), "predictions", ["entry_id"], unique=False
    )

    op.create_table(
        "round_settlements",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("round_id", ID_TYPE, nullable=False),
        sa.Column("gross_pool", sa.Integer(), nullable=False),
        sa.Column("admin_fee", sa.Integer(), nullable=False),
        sa.Column("remainder", sa.Integer(), nullable=False),
        sa.Column("net_pool", sa.Integer(), nullable=False),
        sa.Column("amount_per_winner", sa.Integer(), nullable=False),
        sa.Column("accumulated", sa.Integer(), nullable=False),
        sa.Column("trigger", sa.String(length=30), nullable=False),
        sa.Column("winner_entry_ids", sa.JSON(), nullable=False),
        sa.Column("participant_count", sa.Integer(), nullable=False),
        sa.Column("settled_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["round_id"],
            ["rounds.id"],
            name=op.f("fk_round_settlements_round_id_rounds"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_round_settlements")),
        sa.UniqueConstraint("round_id", name=op.f("uq_round_settlements_round_id")),
    )
    op.create_index(
        op.f("ix_round_settlements_id"), "round_settlements", ["id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_round_settlements_id"), table_name="round_settlements")
    op.drop_table("round_settlements")
    op.drop_index(op.f("ix_predictions_entry_id"), table_name="predictions")
    op.drop_index(op.f("ix_predictions_fixture_id"), table_name="predictions")
    op.drop_index(op.f("ix_predictions_id"), table_name="predictions")
    op.drop_table("predictions")
    op.drop_index(op.f("ix_entries_participant_id"), table_name="entries")
    op.drop_index(op.f("ix_entries_round_id"), table_name="entries")
    op.drop_index(op.f("ix_entries_id"), table_name="entries")
    op.drop_table("entries")
    op.drop_index(op.f("ix_fixtures_round_id"), table_name="fixtures")
    op.drop_index(op.f("ix_fixtures_id"), table_name="fixtures")
    op.drop_table("fixtures")
    op.drop_index(op.f("ix_rounds_id"), table_name="rounds")
    op.drop_table("rounds")
