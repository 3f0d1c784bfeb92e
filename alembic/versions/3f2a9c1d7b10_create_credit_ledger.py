"""Create credit ledger and processed payment events

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2025-11-04 10:12:41.530218

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the credit_ledgers and processed_payment_events tables."""
    op.create_table(
        "credit_ledgers",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("balance", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("balance >= 0", name="ck_credit_ledgers_balance_non_negative"),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_table(
        "processed_payment_events",
        sa.Column("event_id", sa.String(length=255), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("credits_added", sa.Integer(), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("event_id"),
    )
    op.create_index(
        op.f("ix_processed_payment_events_user_id"),
        "processed_payment_events",
        ["user_id"],
        unique=False,
    )


def downgrade() -> None:
    """Drop the ledger tables."""
    op.drop_index(
        op.f("ix_processed_payment_events_user_id"),
        table_name="processed_payment_events",
    )
    op.drop_table("processed_payment_events")
    op.drop_table("credit_ledgers")
