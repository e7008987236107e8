"""sports teams and events

Revision ID: 20260110000100
Revises: 
Create Date: 2026-01-10 00:01:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260110000100"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sports_teams",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("league", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("abbreviation", sa.String(), nullable=False),
        sa.Column("conference", sa.String(), nullable=True),
        sa.Column("division", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("color", sa.String(), nullable=True),
        sa.Column("alternate_color", sa.String(), nullable=True),
        sa.Column(
            "created",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.Column(
            "modified",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id", "league", name="pk_sports_teams"),
    )

    op.create_table(
        "sports_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("espn_id", sa.String(), nullable=False),
        sa.Column("league", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("home_team_id", sa.String(), nullable=False),
        sa.Column("away_team_id", sa.String(), nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("season", sa.Integer(), nullable=False),
        sa.Column("week", sa.Integer(), nullable=True),
        sa.Column("postseason", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("venue", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="scheduled"),
        sa.Column("status_detail", sa.String(), nullable=True),
        sa.Column("period", sa.Integer(), nullable=True),
        sa.Column("clock", sa.String(), nullable=True),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("home_q1", sa.Integer(), nullable=True),
        sa.Column("home_q2", sa.Integer(), nullable=True),
        sa.Column("home_q3", sa.Integer(), nullable=True),
        sa.Column("home_q4", sa.Integer(), nullable=True),
        sa.Column("home_ot", sa.Integer(), nullable=True),
        sa.Column("away_q1", sa.Integer(), nullable=True),
        sa.Column("away_q2", sa.Integer(), nullable=True),
        sa.Column("away_q3", sa.Integer(), nullable=True),
        sa.Column("away_q4", sa.Integer(), nullable=True),
        sa.Column("away_ot", sa.Integer(), nullable=True),
        sa.Column(
            "created",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.Column(
            "modified",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.Column(
            "last_synced",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("espn_id"),
    )
    op.create_index(op.f("ix_sports_events_id"), "sports_events", ["id"], unique=False)
    op.create_index(op.f("ix_sports_events_league"), "sports_events", ["league"], unique=False)
    op.create_index(op.f("ix_sports_events_event_date"), "sports_events", ["event_date"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_sports_events_event_date"), table_name="sports_events")
    op.drop_index(op.f("ix_sports_events_league"), table_name="sports_events")
    op.drop_index(op.f("ix_sports_events_id"), table_name="sports_events")
    op.drop_table("sports_events")
    op.drop_table("sports_teams")
