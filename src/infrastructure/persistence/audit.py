"""Audit tagging: tell the database server who is making the current change.

The actor is written to a transaction-local server setting that audit
triggers read (see migration 0002). It must reach the connection before any
pending row is flushed, and it must disappear when the transaction ends so
pooled connections never carry it into someone else's transaction.
"""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# set_config(..., is_local => true) scopes the value to the current transaction.
_TAG_STATEMENTS = {
    "postgresql": text("SELECT set_config(:key, :actor, true)"),
}


def supports_audit_tagging(dialect_name: str) -> bool:
    return dialect_name in _TAG_STATEMENTS


async def tag_transaction(session: AsyncSession, actor: str | None, key: str) -> None:
    """Attach actor to the session's current transaction under setting key.

    Does nothing when actor is None. Dialects without transaction-local
    settings are skipped with a debug entry rather than failing the commit.
    """
    if actor is None:
        return
    dialect_name = session.get_bind().dialect.name
    stmt = _TAG_STATEMENTS.get(dialect_name)
    if stmt is None:
        logger.debug("Audit tag for %r skipped: dialect %s has no session settings", actor, dialect_name)
        return
    # Executing with autoflush on would send staged rows before the tag.
    with session.sync_session.no_autoflush:
        await session.execute(stmt, {"key": key, "actor": actor})
    logger.debug("Tagged transaction with %s=%r", key, actor)
