"""Account performance calculations over stored positions."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from src.domain.repositories.positions import PositionQueryRepository


class PerformanceService:
    def __init__(self, positions: PositionQueryRepository) -> None:
        self._positions = positions

    async def calculate_daily_gain_loss(self, account_code: str, position_date: date) -> Decimal:
        """Day-over-day change in the account's total market value.

        Today's and the previous day's positions are fetched concurrently.
        """
        today, yesterday = await asyncio.gather(
            self._positions.get_positions_for_account(account_code, position_date),
            self._positions.get_positions_for_account(
                account_code, position_date - timedelta(days=1)
            ),
        )
        return _total(today) - _total(yesterday)


def _total(positions) -> Decimal:
    return sum((p.market_value for p in positions), Decimal(0))
