"""Tests for PositionService: booking trades into positions."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.domain.errors import ArgumentError
from src.domain.models import Account, Position, Trade
from src.domain.services.positions import PositionService

TODAY = date(2025, 6, 2)


def _uow(account=Account(account_code="A1")):
    uow = MagicMock()
    uow.accounts.find = AsyncMock(return_value=account)
    uow.trades.add = AsyncMock()
    uow.positions.add = AsyncMock()
    uow.positions.update = AsyncMock()
    uow.commit = AsyncMock()
    return uow


def _trade(**overrides):
    defaults = {
        "trade_date": TODAY,
        "market_value": Decimal("100"),
        "account_code": "A1",
        "security_id": 7,
    }
    defaults.update(overrides)
    return Trade(**defaults)


def _service(uow, existing=None):
    positions = AsyncMock()
    positions.get_position.return_value = existing
    return PositionService(uow, positions), positions


# --- validation ---

async def test_none_trade_raises_argument_error():
    service, _ = _service(_uow())
    with pytest.raises(ArgumentError):
        await service.add_or_update_position(None, "user1")  # type: ignore[arg-type]


async def test_unlinked_trade_raises_argument_error():
    uow = _uow()
    service, _ = _service(uow)
    with pytest.raises(ArgumentError):
        await service.add_or_update_position(_trade(security_id=None), "user1")
    uow.commit.assert_not_awaited()


async def test_unknown_account_raises_and_stages_nothing():
    uow = _uow(account=None)
    service, _ = _service(uow)
    with pytest.raises(ArgumentError, match="unknown account"):
        await service.add_or_update_position(_trade(), "user1")
    uow.trades.add.assert_not_awaited()
    uow.commit.assert_not_awaited()


# --- new position ---

async def test_new_position_adds_trade_and_position_then_commits_once():
    uow = _uow()
    service, positions = _service(uow)
    trade = _trade()

    position = await service.add_or_update_position(trade, "user1")

    positions.get_position.assert_awaited_once_with("A1", 7)
    uow.trades.add.assert_awaited_once_with(trade)
    uow.positions.add.assert_awaited_once_with(position)
    uow.positions.update.assert_not_awaited()
    uow.commit.assert_awaited_once_with("user1")


async def test_new_position_copies_trade_values():
    service, _ = _service(_uow())
    position = await service.add_or_update_position(_trade(market_value=Decimal("250")), "user1")
    assert position.account_code == "A1"
    assert position.security_id == 7
    assert position.position_date == TODAY
    assert position.market_value == Decimal("250")


# --- existing position ---

async def test_existing_position_is_updated_with_trade_value():
    uow = _uow()
    existing = Position(
        position_id=3, account_code="A1", security_id=7, position_date=TODAY, market_value=Decimal("40")
    )
    service, _ = _service(uow, existing=existing)

    position = await service.add_or_update_position(_trade(market_value=Decimal("60")), "user1")

    assert position is existing
    assert position.market_value == Decimal("100")
    uow.positions.update.assert_awaited_once_with(existing)
    uow.positions.add.assert_not_awaited()
    uow.commit.assert_awaited_once_with("user1")
