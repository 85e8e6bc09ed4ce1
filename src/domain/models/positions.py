"""Position domain model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class Position(BaseModel):
    """Holding of one security in one account on one date.

    position_id is generated by the store and stays None until the first
    flush that inserts the row. Callers expect at most one position per
    (account_code, security_id, position_date); nothing here enforces it.
    """

    position_id: int | None = None
    account_code: str
    security_id: int
    position_date: date
    market_value: Decimal
