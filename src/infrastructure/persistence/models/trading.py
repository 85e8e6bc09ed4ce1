"""Trading layer ORM models: positions, trades.

changed_by / changed_at are stamped by the audit trigger installed in
migration 0002 from the transaction-local audit setting. The application
never writes them.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database import Base

MONEY = Numeric(19, 4)


class Position(Base):
    """Market value of one security held by one account on one date.

    Composite natural key (account_code, security_id, position_date) is
    unique; position_id is the generated surrogate key.
    """

    __tablename__ = "positions"
    __table_args__ = (
        UniqueConstraint(
            "account_code",
            "security_id",
            "position_date",
            name="uq_positions_account_security_date",
        ),
        Index("ix_positions_account_date", "account_code", "position_date"),
    )

    position_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_code: Mapped[str] = mapped_column(
        Text, ForeignKey("accounts.account_code"), nullable=False
    )
    security_id: Mapped[int] = mapped_column(Integer, nullable=False)
    position_date: Mapped[date] = mapped_column(Date, nullable=False)
    market_value: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    changed_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class Trade(Base):
    """Executed trade. account_code / security_id are null for cash movements."""

    __tablename__ = "trades"
    __table_args__ = (Index("ix_trades_account_date", "account_code", "trade_date"),)

    trade_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    trade_date: Mapped[date] = mapped_column(Date, nullable=False)
    market_value: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    account_code: Mapped[Optional[str]] = mapped_column(
        Text, ForeignKey("accounts.account_code"), nullable=True
    )
    security_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    changed_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
