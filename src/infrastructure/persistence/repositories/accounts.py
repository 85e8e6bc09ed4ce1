"""SQLAlchemy implementations of the account repositories."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.models.accounts import Account as DomainAccount
from src.domain.repositories.accounts import AccountQueryRepository
from src.infrastructure.persistence.models.reference import Account as OrmAccount

from .command import SqlCommandRepository


def _to_domain(row: OrmAccount) -> DomainAccount:
    return DomainAccount(account_code=row.account_code, name=row.name)


def _to_orm(entity: DomainAccount) -> OrmAccount:
    return OrmAccount(account_code=entity.account_code, name=entity.name)


class SqlAccountQueryRepository(AccountQueryRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_accounts(self) -> list[DomainAccount]:
        stmt = select(OrmAccount).order_by(OrmAccount.account_code)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_domain(row) for row in result.scalars()]


class SqlAccountCommandRepository(SqlCommandRepository[DomainAccount, OrmAccount]):
    orm_model = OrmAccount
    _to_domain = staticmethod(_to_domain)
    _to_orm = staticmethod(_to_orm)
