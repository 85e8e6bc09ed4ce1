"""Account domain model.

Accounts are reference data: the trading core looks them up but never
changes them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Account(BaseModel):
    """A client account identified by its external account code."""

    model_config = ConfigDict(frozen=True)

    account_code: str
    name: str | None = None
