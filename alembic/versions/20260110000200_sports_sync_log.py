"""sports sync log

Revision ID: 20260110000200
Revises: 20260110000100
Create Date: 2026-01-10 00:02:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260110000200"
down_revision = "20260110000100"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sports_sync_log",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sync_type", sa.String(), nullable=False),
        sa.Column("league", sa.String(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("records_processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sports_sync_log_id"), "sports_sync_log", ["id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_sports_sync_log_id"), table_name="sports_sync_log")
    op.drop_table("sports_sync_log")
