"""Tests for SqlUnitOfWork: repository caching, commit modes, transaction state.

The session is a mock; SQLite-backed behaviour lives in tests/integration.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.domain.errors import TransactionStateError, UnresolvedTransactionError
from src.infrastructure.persistence.repositories import (
    SqlAccountCommandRepository,
    SqlPositionCommandRepository,
    SqlTradeCommandRepository,
)
from src.infrastructure.persistence.unit_of_work import (
    SqlUnitOfWork,
    TransactionScope,
    TransactionStatus,
)


def _session(dialect="postgresql", calls=None):
    session = MagicMock()
    for name in ("execute", "flush", "commit", "rollback", "close", "connection"):
        mock = AsyncMock()
        if calls is not None:
            mock.side_effect = lambda *a, _name=name, **k: calls.append(_name)
        setattr(session, name, mock)
    session.get_bind.return_value.dialect.name = dialect
    return session


def _uow(session):
    return SqlUnitOfWork(lambda: session, audit_context_key="app.changed_by")


# --- repositories ---

def test_repositories_not_built_until_accessed():
    uow = _uow(_session())
    assert uow._repositories == {}


def test_repository_accessors_return_typed_repositories():
    uow = _uow(_session())
    assert isinstance(uow.accounts, SqlAccountCommandRepository)
    assert isinstance(uow.positions, SqlPositionCommandRepository)
    assert isinstance(uow.trades, SqlTradeCommandRepository)


def test_repository_built_once_per_unit_of_work():
    uow = _uow(_session())
    assert uow.positions is uow.positions
    assert len(uow._repositories) == 1


def test_repositories_share_the_unit_of_work_session():
    session = _session()
    uow = _uow(session)
    assert uow.positions._session is session
    assert uow.trades._session is session


def test_separate_units_of_work_have_separate_repositories():
    assert _uow(_session()).positions is not _uow(_session()).positions


# --- anonymous commit ---

async def test_commit_with_nothing_staged_succeeds():
    session = _session()
    await _uow(session).commit()
    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


async def test_commit_without_actor_sends_no_tag():
    session = _session()
    await _uow(session).commit()
    session.execute.assert_not_awaited()


async def test_commit_tags_before_flush_then_commits():
    calls = []
    session = _session(calls=calls)
    await _uow(session).commit("user1")
    assert calls == ["execute", "flush", "commit"]


async def test_failed_flush_rolls_back_and_propagates():
    session = _session()
    session.flush.side_effect = OperationalError("INSERT", {}, Exception("server gone"))
    with pytest.raises(OperationalError):
        await _uow(session).commit("user1")
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


async def test_failed_commit_clears_staged_key_tracking():
    session = _session()
    session.commit.side_effect = OperationalError("COMMIT", {}, Exception("lost"))
    uow = _uow(session)
    uow.positions._added.append((MagicMock(), MagicMock()))
    with pytest.raises(OperationalError):
        await uow.commit()
    assert uow.positions.generated_keys() == []


async def test_cancelled_commit_still_rolls_back():
    session = _session()
    session.flush.side_effect = asyncio.CancelledError()
    with pytest.raises(asyncio.CancelledError):
        await _uow(session).commit()
    session.rollback.assert_awaited_once()


async def test_overlapping_commit_on_same_instance_is_rejected():
    session = _session()
    gate = asyncio.Event()

    async def slow_flush():
        await gate.wait()

    session.flush.side_effect = slow_flush
    uow = _uow(session)
    first = asyncio.create_task(uow.commit())
    await asyncio.sleep(0)

    with pytest.raises(TransactionStateError):
        await uow.commit()

    gate.set()
    await first
    session.commit.assert_awaited_once()


# --- explicit transactions ---

async def test_begin_transaction_opens_connection_and_returns_scope():
    session = _session()
    uow = _uow(session)
    scope = await uow.begin_transaction()
    assert isinstance(scope, TransactionScope)
    assert scope.status is TransactionStatus.OPEN
    assert uow.in_transaction
    session.connection.assert_awaited_once()


async def test_begin_transaction_twice_raises():
    uow = _uow(_session())
    await uow.begin_transaction()
    with pytest.raises(TransactionStateError):
        await uow.begin_transaction()


async def test_commit_transaction_without_open_transaction_raises():
    with pytest.raises(TransactionStateError):
        await _uow(_session()).commit_transaction()


async def test_rollback_transaction_without_open_transaction_raises():
    with pytest.raises(TransactionStateError):
        await _uow(_session()).rollback_transaction()


async def test_commit_inside_transaction_flushes_without_committing():
    calls = []
    session = _session(calls=calls)
    uow = _uow(session)
    await uow.begin_transaction()
    calls.clear()

    await uow.commit("user1")

    assert calls == ["execute", "flush"]
    assert uow.in_transaction


async def test_commit_transaction_commits_and_returns_to_idle():
    session = _session()
    uow = _uow(session)
    scope = await uow.begin_transaction()
    await uow.commit()
    await uow.commit_transaction()
    session.commit.assert_awaited_once()
    assert scope.status is TransactionStatus.COMMITTED
    assert not uow.in_transaction


async def test_rollback_transaction_rolls_back_and_returns_to_idle():
    session = _session()
    uow = _uow(session)
    scope = await uow.begin_transaction()
    await uow.rollback_transaction()
    session.rollback.assert_awaited_once()
    assert scope.status is TransactionStatus.ROLLED_BACK
    assert not uow.in_transaction


async def test_failed_commit_transaction_rolls_back_and_returns_to_idle():
    session = _session()
    session.commit.side_effect = OperationalError("COMMIT", {}, Exception("lost"))
    uow = _uow(session)
    scope = await uow.begin_transaction()
    with pytest.raises(OperationalError):
        await uow.commit_transaction()
    session.rollback.assert_awaited_once()
    assert scope.status is TransactionStatus.ROLLED_BACK
    assert not uow.in_transaction


async def test_new_transaction_allowed_after_resolution():
    uow = _uow(_session())
    await uow.begin_transaction()
    await uow.commit_transaction()
    scope = await uow.begin_transaction()
    assert scope.is_open


# --- transaction scope ---

async def test_scope_commit_shortcut():
    session = _session()
    uow = _uow(session)
    async with await uow.begin_transaction() as scope:
        await scope.commit()
    assert scope.status is TransactionStatus.COMMITTED
    session.commit.assert_awaited_once()


async def test_scope_left_unresolved_rolls_back_and_raises():
    session = _session()
    uow = _uow(session)
    with pytest.raises(UnresolvedTransactionError):
        async with await uow.begin_transaction():
            await uow.commit()
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
    assert not uow.in_transaction


async def test_scope_exception_rolls_back_and_propagates():
    session = _session()
    uow = _uow(session)
    with pytest.raises(ValueError, match="boom"):
        async with await uow.begin_transaction():
            raise ValueError("boom")
    session.rollback.assert_awaited_once()
    assert not uow.in_transaction


async def test_resolved_scope_cannot_be_resolved_again():
    uow = _uow(_session())
    scope = await uow.begin_transaction()
    await scope.rollback()
    with pytest.raises(TransactionStateError):
        await scope.commit()


# --- disposal ---

async def test_close_releases_session():
    session = _session()
    await _uow(session).close()
    session.close.assert_awaited_once()


async def test_close_with_open_transaction_marks_it_rolled_back():
    session = _session()
    uow = _uow(session)
    scope = await uow.begin_transaction()
    await uow.close()
    assert scope.status is TransactionStatus.ROLLED_BACK
    assert not uow.in_transaction
    session.close.assert_awaited_once()


async def test_async_with_closes_session():
    session = _session()
    async with _uow(session) as uow:
        assert isinstance(uow, SqlUnitOfWork)
    session.close.assert_awaited_once()
