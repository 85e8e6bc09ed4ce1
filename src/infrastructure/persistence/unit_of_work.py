"""SQLAlchemy implementation of TradingUnitOfWork.

SqlUnitOfWork owns exactly one AsyncSession. Command repositories are built
on first access and cached, so every repository of one unit of work stages
into the same pending change set.

Transaction state per instance:

    IDLE --begin_transaction()--> OPEN --commit_transaction()--> COMMITTED -> IDLE
                                       --rollback_transaction()-> ROLLED_BACK -> IDLE

commit() outside that machine runs a self-contained transaction: tag, flush,
commit, release. Inside it, commit() only tags and flushes.
"""

from __future__ import annotations

import enum
import logging
from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.errors import TransactionStateError, UnresolvedTransactionError
from src.domain.unit_of_work import TradingUnitOfWork
from src.infrastructure.database import AsyncSessionLocal, settings
from src.infrastructure.persistence.audit import tag_transaction
from src.infrastructure.persistence.repositories.accounts import SqlAccountCommandRepository
from src.infrastructure.persistence.repositories.command import (
    GeneratedKeys,
    SqlCommandRepository,
    apply_generated_keys,
)
from src.infrastructure.persistence.repositories.positions import SqlPositionCommandRepository
from src.infrastructure.persistence.repositories.trades import SqlTradeCommandRepository

logger = logging.getLogger(__name__)


class TransactionStatus(enum.Enum):
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionScope:
    """Handle for a transaction opened with SqlUnitOfWork.begin_transaction().

    Use it as an async context manager. Leaving the block while the
    transaction is still open rolls it back; when the block itself finished
    without an exception this also raises UnresolvedTransactionError, so a
    forgotten commit_transaction() never passes silently.
    """

    def __init__(self, uow: SqlUnitOfWork) -> None:
        self._uow = uow
        self.status = TransactionStatus.OPEN

    @property
    def is_open(self) -> bool:
        return self.status is TransactionStatus.OPEN

    async def commit(self) -> None:
        self._check_current()
        await self._uow.commit_transaction()

    async def rollback(self) -> None:
        self._check_current()
        await self._uow.rollback_transaction()

    def _check_current(self) -> None:
        if not self.is_open:
            raise TransactionStateError(f"transaction already {self.status.value}")

    async def __aenter__(self) -> TransactionScope:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self.is_open:
            return
        logger.warning("Transaction scope exited unresolved; rolling back")
        await self._uow.rollback_transaction()
        if exc_type is None:
            raise UnresolvedTransactionError(
                "transaction was neither committed nor rolled back"
            )


class SqlUnitOfWork(TradingUnitOfWork):
    """Unit of work over one AsyncSession drawn from session_factory.

    Not safe for concurrent use: serialise every call on one instance.
    Close it (or use ``async with``) to release the session; uncommitted
    changes are discarded.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        audit_context_key: str | None = None,
    ) -> None:
        factory = session_factory if session_factory is not None else AsyncSessionLocal
        self._session = factory()
        self._audit_context_key = audit_context_key or settings.audit_context_key
        self._repositories: dict[type[SqlCommandRepository], SqlCommandRepository] = {}
        self._transaction: TransactionScope | None = None
        self._committing = False

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    # ------------------------------------------------------------------ #
    # Repositories                                                         #
    # ------------------------------------------------------------------ #

    def _repository(self, repo_cls: type[SqlCommandRepository]) -> SqlCommandRepository:
        repo = self._repositories.get(repo_cls)
        if repo is None:
            repo = self._repositories[repo_cls] = repo_cls(self._session)
        return repo

    @property
    def accounts(self) -> SqlAccountCommandRepository:
        return self._repository(SqlAccountCommandRepository)

    @property
    def positions(self) -> SqlPositionCommandRepository:
        return self._repository(SqlPositionCommandRepository)

    @property
    def trades(self) -> SqlTradeCommandRepository:
        return self._repository(SqlTradeCommandRepository)

    # ------------------------------------------------------------------ #
    # Commit                                                               #
    # ------------------------------------------------------------------ #

    async def commit(self, actor: str | None = None) -> None:
        if self._committing:
            raise TransactionStateError("a commit is already running on this unit of work")
        self._committing = True
        try:
            if self._transaction is None:
                await self._commit_anonymous(actor)
            else:
                await self._flush_in_transaction(actor)
        finally:
            self._committing = False

    async def _commit_anonymous(self, actor: str | None) -> None:
        try:
            await tag_transaction(self._session, actor, self._audit_context_key)
            keys = await self._flush_and_commit()
        except BaseException:
            await self._session.rollback()
            raise
        finally:
            self._clear_pending()
        apply_generated_keys(keys)
        logger.debug("Committed unit of work (actor=%r)", actor)

    async def _flush_in_transaction(self, actor: str | None) -> None:
        await tag_transaction(self._session, actor, self._audit_context_key)
        await self._session.flush()
        keys = self._generated_keys()
        self._clear_pending()
        apply_generated_keys(keys)
        logger.debug("Flushed unit of work into open transaction (actor=%r)", actor)

    async def _flush_and_commit(self) -> GeneratedKeys:
        # Keys are read between flush and commit: an expiring commit would
        # otherwise force a lazy load per row.
        await self._session.flush()
        keys = self._generated_keys()
        await self._session.commit()
        return keys

    # ------------------------------------------------------------------ #
    # Explicit transactions                                                #
    # ------------------------------------------------------------------ #

    async def begin_transaction(self) -> TransactionScope:
        if self._transaction is not None:
            raise TransactionStateError("a transaction is already open on this unit of work")
        await self._session.connection()
        self._transaction = TransactionScope(self)
        logger.debug("Transaction opened")
        return self._transaction

    async def commit_transaction(self) -> None:
        scope = self._require_transaction()
        try:
            keys = await self._flush_and_commit()
        except BaseException:
            await self._session.rollback()
            scope.status = TransactionStatus.ROLLED_BACK
            raise
        else:
            scope.status = TransactionStatus.COMMITTED
        finally:
            self._transaction = None
            self._clear_pending()
        apply_generated_keys(keys)
        logger.debug("Transaction committed")

    async def rollback_transaction(self) -> None:
        scope = self._require_transaction()
        try:
            await self._session.rollback()
        finally:
            scope.status = TransactionStatus.ROLLED_BACK
            self._transaction = None
            self._clear_pending()
        logger.debug("Transaction rolled back")

    def _require_transaction(self) -> TransactionScope:
        if self._transaction is None:
            raise TransactionStateError("no transaction is open on this unit of work")
        return self._transaction

    # ------------------------------------------------------------------ #
    # Disposal                                                             #
    # ------------------------------------------------------------------ #

    async def close(self) -> None:
        if self._transaction is not None:
            logger.warning("Unit of work closed with an open transaction; rolling back")
            self._transaction.status = TransactionStatus.ROLLED_BACK
            self._transaction = None
        self._clear_pending()
        await self._session.close()

    def _generated_keys(self) -> GeneratedKeys:
        return [pair for repo in self._repositories.values() for pair in repo.generated_keys()]

    def _clear_pending(self) -> None:
        for repo in self._repositories.values():
            repo.clear_pending()
