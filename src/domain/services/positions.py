"""Position maintenance service.

Books a trade against its account: the trade is recorded and the matching
position is either opened or has the trade's value added to it. Trade and
position reach the store in one commit, tagged with the acting user.
"""

from __future__ import annotations

import logging

from src.domain.errors import ArgumentError
from src.domain.models.positions import Position
from src.domain.models.trades import Trade
from src.domain.repositories.positions import PositionQueryRepository
from src.domain.unit_of_work import TradingUnitOfWork

logger = logging.getLogger(__name__)


class PositionService:
    def __init__(self, uow: TradingUnitOfWork, positions: PositionQueryRepository) -> None:
        self._uow = uow
        self._positions = positions

    async def add_or_update_position(self, trade: Trade, actor: str) -> Position:
        """Record trade and fold it into its position, committing once.

        Raises ArgumentError if the trade is missing, not linked to an
        account and security, or names an unknown account.
        """
        if trade is None:
            raise ArgumentError("trade must not be None")
        if trade.account_code is None or trade.security_id is None:
            raise ArgumentError("trade must carry an account_code and a security_id")

        if await self._uow.accounts.find(trade.account_code) is None:
            raise ArgumentError(f"unknown account code {trade.account_code!r}")

        position = await self._positions.get_position(trade.account_code, trade.security_id)
        await self._uow.trades.add(trade)
        if position is None:
            position = Position(
                account_code=trade.account_code,
                security_id=trade.security_id,
                position_date=trade.trade_date,
                market_value=trade.market_value,
            )
            await self._uow.positions.add(position)
        else:
            position.market_value += trade.market_value
            await self._uow.positions.update(position)

        await self._uow.commit(actor)
        logger.info(
            "Booked trade %s into position %s for %s",
            trade.trade_id,
            position.position_id,
            trade.account_code,
        )
        return position
