"""Unit of work interfaces.

A unit of work owns one transactional session for its lifetime. Command
repositories obtained from it all stage changes against that session, and
commit() sends the whole pending change set to the store as one atomic
transaction.

Two transaction modes exist:
  - anonymous: commit() with no explicit transaction opens a short
    transaction, flushes, commits and releases the connection;
  - explicit: begin_transaction() opens a transaction that survives any
    number of commit() calls until commit_transaction() or
    rollback_transaction() resolves it.

A unit of work is not safe for concurrent use. Callers must serialise every
call that touches one instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from src.domain.models.accounts import Account
from src.domain.models.positions import Position
from src.domain.models.trades import Trade
from src.domain.repositories.base import CommandRepository


class UnitOfWork(ABC):
    """ORM-agnostic unit of work."""

    @abstractmethod
    async def commit(self, actor: str | None = None) -> None:
        """Flush staged changes, tagging the transaction with actor when given.

        Commits immediately unless a transaction was opened with
        begin_transaction(), in which case the changes join that transaction.
        """

    @abstractmethod
    async def begin_transaction(self):
        """Open an explicit transaction and return its handle.

        Raises TransactionStateError if a transaction is already open.
        """

    @abstractmethod
    async def commit_transaction(self) -> None:
        """Commit the transaction opened by begin_transaction()."""

    @abstractmethod
    async def rollback_transaction(self) -> None:
        """Roll back the transaction opened by begin_transaction()."""

    @abstractmethod
    async def close(self) -> None:
        """Discard uncommitted changes and release the session."""

    async def __aenter__(self):
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


class TradingUnitOfWork(UnitOfWork):
    """Unit of work exposing one command repository per trading entity."""

    @property
    @abstractmethod
    def accounts(self) -> CommandRepository[Account]:
        ...

    @property
    @abstractmethod
    def positions(self) -> CommandRepository[Position]:
        ...

    @property
    @abstractmethod
    def trades(self) -> CommandRepository[Trade]:
        ...
