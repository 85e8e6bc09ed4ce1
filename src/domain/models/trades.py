"""Trade domain model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class Trade(BaseModel):
    """A single executed trade.

    account_code and security_id link the trade to the position it moves;
    both are optional because cash movements carry no security.
    """

    trade_id: int | None = None
    trade_date: date
    market_value: Decimal
    account_code: str | None = None
    security_id: int | None = None
