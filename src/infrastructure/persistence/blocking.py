"""Blocking facade over SqlUnitOfWork for synchronous callers.

Every call is driven to completion on a private asyncio.Runner owned by the
facade, so the session and its connections always live on one event loop.
Never use it from code that is already running inside an event loop; use
SqlUnitOfWork directly there.

The engine behind the session factory should not be shared with other
event loops: pooled async connections are bound to the loop that opened
them. Without an explicit factory the facade builds its own NullPool
engine from settings and disposes of it on close.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from types import TracebackType
from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from src.domain.models.accounts import Account
from src.domain.models.positions import Position
from src.domain.models.trades import Trade
from src.domain.repositories.base import CommandRepository
from src.infrastructure import database
from src.infrastructure.persistence.unit_of_work import SqlUnitOfWork, TransactionScope

T = TypeVar("T")


class BlockingCommandRepository(Generic[T]):
    """Synchronous mirror of a CommandRepository."""

    def __init__(self, runner: asyncio.Runner, repository: CommandRepository[T]) -> None:
        self._runner = runner
        self._repository = repository

    def find(self, *key: Any) -> T | None:
        return self._runner.run(self._repository.find(*key))

    def add(self, entity: T) -> None:
        self._runner.run(self._repository.add(entity))

    def add_range(self, entities: Iterable[T]) -> None:
        self._runner.run(self._repository.add_range(entities))

    def remove(self, entity: T) -> None:
        self._runner.run(self._repository.remove(entity))

    def remove_range(self, entities: Iterable[T]) -> None:
        self._runner.run(self._repository.remove_range(entities))

    def update(self, entity: T) -> None:
        self._runner.run(self._repository.update(entity))

    def update_range(self, entities: Iterable[T]) -> None:
        self._runner.run(self._repository.update_range(entities))


class BlockingTransaction:
    """Synchronous transaction handle; same exit rules as TransactionScope."""

    def __init__(self, owner: BlockingUnitOfWork, scope: TransactionScope) -> None:
        self._owner = owner
        self._scope = scope

    @property
    def is_open(self) -> bool:
        return self._scope.is_open

    def commit(self) -> None:
        self._owner._run(self._scope.commit())

    def rollback(self) -> None:
        self._owner._run(self._scope.rollback())

    def __enter__(self) -> BlockingTransaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._owner._run(self._scope.__aexit__(exc_type, exc, tb))


class BlockingUnitOfWork:
    """Synchronous unit of work: ``with BlockingUnitOfWork(factory) as uow: ...``."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        audit_context_key: str | None = None,
    ) -> None:
        self._engine = None
        if session_factory is None:
            session_factory = database.create_session_factory(
                database.settings.database_url,
                echo=database.settings.database_echo,
                poolclass=NullPool,
            )
            self._engine = session_factory.kw["bind"]
        self._runner = asyncio.Runner()
        self._uow = SqlUnitOfWork(session_factory, audit_context_key=audit_context_key)
        self._accounts: BlockingCommandRepository[Account] | None = None
        self._positions: BlockingCommandRepository[Position] | None = None
        self._trades: BlockingCommandRepository[Trade] | None = None

    def _run(self, coro):
        return self._runner.run(coro)

    @property
    def accounts(self) -> BlockingCommandRepository[Account]:
        if self._accounts is None:
            self._accounts = BlockingCommandRepository(self._runner, self._uow.accounts)
        return self._accounts

    @property
    def positions(self) -> BlockingCommandRepository[Position]:
        if self._positions is None:
            self._positions = BlockingCommandRepository(self._runner, self._uow.positions)
        return self._positions

    @property
    def trades(self) -> BlockingCommandRepository[Trade]:
        if self._trades is None:
            self._trades = BlockingCommandRepository(self._runner, self._uow.trades)
        return self._trades

    @property
    def in_transaction(self) -> bool:
        return self._uow.in_transaction

    def commit(self, actor: str | None = None) -> None:
        self._run(self._uow.commit(actor))

    def begin_transaction(self) -> BlockingTransaction:
        return BlockingTransaction(self, self._run(self._uow.begin_transaction()))

    def commit_transaction(self) -> None:
        self._run(self._uow.commit_transaction())

    def rollback_transaction(self) -> None:
        self._run(self._uow.rollback_transaction())

    def close(self) -> None:
        try:
            self._run(self._uow.close())
            if self._engine is not None:
                self._run(self._engine.dispose())
        finally:
            self._runner.close()

    def __enter__(self) -> BlockingUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = [
    "BlockingCommandRepository",
    "BlockingTransaction",
    "BlockingUnitOfWork",
]
