"""Concrete SQLAlchemy repository implementations.

Exports the query and command repository classes and the
get_query_repositories() factory for wiring at the application boundary.
Command repositories are not meant to be built here: SqlUnitOfWork creates
them on first access, bound to its own session.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .accounts import SqlAccountCommandRepository, SqlAccountQueryRepository
from .command import SqlCommandRepository, apply_generated_keys
from .positions import SqlPositionCommandRepository, SqlPositionQueryRepository
from .trades import SqlTradeCommandRepository, SqlTradeQueryRepository


@dataclass(frozen=True)
class QueryRepositories:
    """All query repositories sharing one session factory (never one session)."""

    accounts: SqlAccountQueryRepository
    positions: SqlPositionQueryRepository
    trades: SqlTradeQueryRepository


def get_query_repositories(
    session_factory: async_sessionmaker[AsyncSession],
) -> QueryRepositories:
    """Construct all query repositories drawing sessions from session_factory.

    The result is stateless and may be shared by concurrent tasks:

        repos = get_query_repositories(AsyncSessionLocal)
        today, yesterday = await asyncio.gather(
            repos.positions.get_positions_for_account("A1", d),
            repos.positions.get_positions_for_account("A1", d - timedelta(days=1)),
        )
    """
    return QueryRepositories(
        accounts=SqlAccountQueryRepository(session_factory),
        positions=SqlPositionQueryRepository(session_factory),
        trades=SqlTradeQueryRepository(session_factory),
    )


__all__ = [
    "SqlCommandRepository",
    "SqlAccountCommandRepository",
    "SqlAccountQueryRepository",
    "SqlPositionCommandRepository",
    "SqlPositionQueryRepository",
    "SqlTradeCommandRepository",
    "SqlTradeQueryRepository",
    "QueryRepositories",
    "apply_generated_keys",
    "get_query_repositories",
]
