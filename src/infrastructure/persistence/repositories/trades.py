"""SQLAlchemy implementations of the trade repositories."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.models.trades import Trade as DomainTrade
from src.domain.repositories.trades import TradeQueryRepository
from src.infrastructure.persistence.models.trading import Trade as OrmTrade

from .command import SqlCommandRepository


def _to_domain(row: OrmTrade) -> DomainTrade:
    return DomainTrade(
        trade_id=row.trade_id,
        trade_date=row.trade_date,
        market_value=row.market_value,
        account_code=row.account_code,
        security_id=row.security_id,
    )


def _to_orm(entity: DomainTrade) -> OrmTrade:
    return OrmTrade(
        trade_id=entity.trade_id,
        trade_date=entity.trade_date,
        market_value=entity.market_value,
        account_code=entity.account_code,
        security_id=entity.security_id,
    )


class SqlTradeQueryRepository(TradeQueryRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_trades_for_account(self, account_code: str, trade_date: date) -> list[DomainTrade]:
        stmt = (
            select(OrmTrade)
            .where(OrmTrade.account_code == account_code, OrmTrade.trade_date == trade_date)
            .order_by(OrmTrade.trade_id)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_domain(row) for row in result.scalars()]


class SqlTradeCommandRepository(SqlCommandRepository[DomainTrade, OrmTrade]):
    orm_model = OrmTrade
    _to_domain = staticmethod(_to_domain)
    _to_orm = staticmethod(_to_orm)
