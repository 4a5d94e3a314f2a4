"""attempts

Revision ID: 0001_attempts
Revises:
Create Date: 2026-10-18 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_attempts"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "attempts",
        sa.Column("identifier", sa.String(length=255), primary_key=True),
        sa.Column("failed_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_attempt_at", sa.BigInteger(), nullable=False),
        sa.CheckConstraint("failed_attempts >= 0", name="ck_attempts_failed_non_negative"),
    )


def downgrade() -> None:
    op.drop_table("attempts")
