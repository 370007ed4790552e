"""kiosk tables

Revision ID: 3f1c9a2e7b10
Revises:
Create Date: 2026-10-16 09:12:44.218530

"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a2e7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the token ledger and daily metrics tables."""
    op.create_table(
        "token_pointer",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("current_token", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "consumed_token",
        sa.Column("token", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("consumed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("token"),
    )
    op.create_table(
        "metrics_day",
        sa.Column("day", sa.String(length=10), nullable=False),
        sa.Column("qr_scans", sa.Integer(), server_default="0", nullable=False),
        sa.Column("unique_scans", sa.Integer(), server_default="0", nullable=False),
        sa.Column("redirects", sa.Integer(), server_default="0", nullable=False),
        sa.Column("revisits", sa.Integer(), server_default="0", nullable=False),
        sa.PrimaryKeyConstraint("day"),
    )


def downgrade() -> None:
    """Drop the kiosk tables."""
    op.drop_table("metrics_day")
    op.drop_table("consumed_token")
    op.drop_table("token_pointer")
