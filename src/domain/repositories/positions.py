"""Position query repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from src.domain.models.positions import Position


class PositionQueryRepository(ABC):
    """Read-only access to positions.

    Implementations must be safe to call concurrently: every call acquires
    and releases its own connection.
    """

    @abstractmethod
    async def get_positions_for_account(
        self, account_code: str, position_date: date
    ) -> list[Position]:
        """Return the account's positions on position_date ordered by security_id."""

    @abstractmethod
    async def get_position(self, account_code: str, security_id: int) -> Position | None:
        """Return the account's most recent position in the security, or None."""
