"""Reference layer ORM models: accounts."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database import Base


class Account(Base):
    """Client account keyed by its external account code.

    Rows are maintained outside the trading core; positions and trades only
    reference them.
    """

    __tablename__ = "accounts"

    account_code: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
