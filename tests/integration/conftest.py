"""SQLite-backed fixtures.

Each test gets a fresh database file so separate sessions (query
repositories, second units of work) see committed data exactly as they
would against a server. NullPool keeps no connection alive between
checkouts.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import src.infrastructure.persistence  # noqa: F401 (registers all mappers)
from src.domain.models import Account
from src.infrastructure.database import Base
from src.infrastructure.persistence import SqlUnitOfWork, get_query_repositories


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'trading.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def account(session_factory):
    account = Account(account_code="A1", name="Main")
    async with SqlUnitOfWork(session_factory) as uow:
        await uow.accounts.add(account)
        await uow.commit("setup")
    return account


@pytest.fixture
async def uow(session_factory, account):
    async with SqlUnitOfWork(session_factory) as uow:
        yield uow


@pytest.fixture
def queries(session_factory):
    return get_query_repositories(session_factory)
