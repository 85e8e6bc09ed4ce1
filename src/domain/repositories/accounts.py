"""Account query repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.accounts import Account


class AccountQueryRepository(ABC):
    """Read-only access to accounts."""

    @abstractmethod
    async def get_accounts(self) -> list[Account]:
        """Return every account ordered by account_code."""
