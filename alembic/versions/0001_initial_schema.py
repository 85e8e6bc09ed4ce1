"""Initial schema: accounts, positions, trades.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("account_code", sa.Text, primary_key=True),
        sa.Column("name", sa.Text, nullable=True),
    )

    op.create_table(
        "positions",
        sa.Column("position_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "account_code",
            sa.Text,
            sa.ForeignKey("accounts.account_code"),
            nullable=False,
        ),
        sa.Column("security_id", sa.Integer, nullable=False),
        sa.Column("position_date", sa.Date, nullable=False),
        sa.Column("market_value", sa.Numeric(19, 4), nullable=False),
        sa.Column("changed_by", sa.Text, nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "account_code",
            "security_id",
            "position_date",
            name="uq_positions_account_security_date",
        ),
    )
    op.create_index("ix_positions_account_date", "positions", ["account_code", "position_date"])

    op.create_table(
        "trades",
        sa.Column("trade_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("trade_date", sa.Date, nullable=False),
        sa.Column("market_value", sa.Numeric(19, 4), nullable=False),
        sa.Column(
            "account_code",
            sa.Text,
            sa.ForeignKey("accounts.account_code"),
            nullable=True,
        ),
        sa.Column("security_id", sa.Integer, nullable=True),
        sa.Column("changed_by", sa.Text, nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_trades_account_date", "trades", ["account_code", "trade_date"])


def downgrade() -> None:
    op.drop_index("ix_trades_account_date", table_name="trades")
    op.drop_table("trades")
    op.drop_index("ix_positions_account_date", table_name="positions")
    op.drop_table("positions")
    op.drop_table("accounts")
