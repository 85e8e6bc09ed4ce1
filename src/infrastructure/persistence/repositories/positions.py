"""SQLAlchemy implementations of the position repositories."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.models.positions import Position as DomainPosition
from src.domain.repositories.positions import PositionQueryRepository
from src.infrastructure.persistence.models.trading import Position as OrmPosition

from .command import SqlCommandRepository


def _to_domain(row: OrmPosition) -> DomainPosition:
    return DomainPosition(
        position_id=row.position_id,
        account_code=row.account_code,
        security_id=row.security_id,
        position_date=row.position_date,
        market_value=row.market_value,
    )


def _to_orm(entity: DomainPosition) -> OrmPosition:
    return OrmPosition(
        position_id=entity.position_id,
        account_code=entity.account_code,
        security_id=entity.security_id,
        position_date=entity.position_date,
        market_value=entity.market_value,
    )


class SqlPositionQueryRepository(PositionQueryRepository):
    """Each call opens and closes its own session, so calls may overlap freely."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_positions_for_account(
        self, account_code: str, position_date: date
    ) -> list[DomainPosition]:
        stmt = (
            select(OrmPosition)
            .where(
                OrmPosition.account_code == account_code,
                OrmPosition.position_date == position_date,
            )
            .order_by(OrmPosition.security_id)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_domain(row) for row in result.scalars()]

    async def get_position(self, account_code: str, security_id: int) -> DomainPosition | None:
        stmt = (
            select(OrmPosition)
            .where(
                OrmPosition.account_code == account_code,
                OrmPosition.security_id == security_id,
            )
            .order_by(OrmPosition.position_date.desc())
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            row = result.scalars().first()
            return _to_domain(row) if row else None


class SqlPositionCommandRepository(SqlCommandRepository[DomainPosition, OrmPosition]):
    orm_model = OrmPosition
    _to_domain = staticmethod(_to_domain)
    _to_orm = staticmethod(_to_orm)
