"""Initial migration: create tournament, batch, match, subscription, seeding and pairing tables

Revision ID: 001_initial
Revises:
Create Date: 2026-03-01 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="upcoming"),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tournamentbatch",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
    )
    op.create_index("ix_tournamentbatch_tournament_id", "tournamentbatch", ["tournament_id"])

    # current_pairing_id / published_pairing_id are plain columns (no FK back to matchpairing)
    op.create_table(
        "tournamentmatch",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("batch_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("match_type", sa.String(), nullable=False, server_default="SINGLE_ELIMINATION_1V1"),
        sa.Column("current_pairing_id", sa.String(), nullable=True),
        sa.Column("published_pairing_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["batch_id"], ["tournamentbatch.id"]),
    )
    op.create_index("ix_tournamentmatch_batch_id", "tournamentmatch", ["batch_id"])
    op.create_index("ix_tournamentmatch_current_pairing_id", "tournamentmatch", ["current_pairing_id"])

    op.create_table(
        "tournamentsubscription",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("external_user_id", sa.String(), nullable=False),
        sa.Column("user_name", sa.String(), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.Column("payment_status", sa.String(), nullable=False, server_default="pending"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.UniqueConstraint("tournament_id", "external_user_id", name="uq_subscription_tournament_user"),
    )
    op.create_index("ix_tournamentsubscription_tournament_id", "tournamentsubscription", ["tournament_id"])
    op.create_index("ix_tournamentsubscription_external_user_id", "tournamentsubscription", ["external_user_id"])

    op.create_table(
        "playerseeding",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("user_name", sa.String(), nullable=True),
        sa.Column("seed_number", sa.Integer(), nullable=True),
        sa.Column("skill_rating", sa.Float(), nullable=True),
        sa.Column("previous_rank", sa.Integer(), nullable=True),
        sa.Column("win_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("loss_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.UniqueConstraint("tournament_id", "user_id", name="uq_seeding_tournament_user"),
    )
    op.create_index("ix_playerseeding_tournament_id", "playerseeding", ["tournament_id"])
    op.create_index("ix_playerseeding_user_id", "playerseeding", ["user_id"])

    op.create_table(
        "matchpairing",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("batch_id", sa.Integer(), nullable=False),
        sa.Column("pairing_type", sa.String(), nullable=False),
        sa.Column("seeding_method", sa.String(), nullable=False),
        sa.Column("algorithm_used", sa.String(), nullable=False),
        sa.Column("pairs_json", sa.JSON(), nullable=False),
        sa.Column("metadata_json", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="proposed"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("proposed_by", sa.String(), nullable=True),
        sa.Column("proposed_at", sa.DateTime(), nullable=False),
        sa.Column("approved_by", sa.String(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("published_by", sa.String(), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("rejected_by", sa.String(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["match_id"], ["tournamentmatch.id"]),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["batch_id"], ["tournamentbatch.id"]),
        sa.UniqueConstraint("match_id", "version", name="uq_pairing_match_version"),
    )
    op.create_index("ix_matchpairing_match_id", "matchpairing", ["match_id"])
    op.create_index("ix_matchpairing_tournament_id", "matchpairing", ["tournament_id"])
    op.create_index("ix_matchpairing_batch_id", "matchpairing", ["batch_id"])
    op.create_index("ix_matchpairing_status", "matchpairing", ["status"])
    op.create_index("ix_matchpairing_proposed_at", "matchpairing", ["proposed_at"])


def downgrade() -> None:
    op.drop_table("matchpairing")
    op.drop_table("playerseeding")
    op.drop_table("tournamentsubscription")
    op.drop_table("tournamentmatch")
    op.drop_table("tournamentbatch")
    op.drop_table("tournament")
