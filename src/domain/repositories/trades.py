"""Trade query repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from src.domain.models.trades import Trade


class TradeQueryRepository(ABC):
    """Read-only access to trades."""

    @abstractmethod
    async def get_trades_for_account(self, account_code: str, trade_date: date) -> list[Trade]:
        """Return the account's trades on trade_date ordered by trade_id."""
