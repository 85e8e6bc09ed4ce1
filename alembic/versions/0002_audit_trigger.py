"""Audit trigger: stamp changed_by / changed_at and log deletes.

The acting user arrives through the transaction-local setting named by
AUDIT_CONTEXT_KEY (default app.changed_by), written by the unit of work
before each flush. The key is read when this revision runs; changing it
later requires re-creating the trigger functions. Rows changed outside
a tagged transaction get changed_by = NULL.

PostgreSQL only; other dialects are left untouched.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

from src.infrastructure.database import settings

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_AUDITED_TABLES = ("positions", "trades")


def _actor_expression(key: str) -> str:
    """SQL reading the acting user from the transaction-local setting."""
    quoted = key.replace("'", "''")
    return f"NULLIF(current_setting('{quoted}', true), '')"


def upgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return

    actor = _actor_expression(settings.audit_context_key)

    op.create_table(
        "audit_log",
        sa.Column("audit_id", sa.BigInteger, sa.Identity(), primary_key=True),
        sa.Column("table_name", sa.Text, nullable=False),
        sa.Column("operation", sa.Text, nullable=False),
        sa.Column("row_data", postgresql.JSONB, nullable=False),
        sa.Column("changed_by", sa.Text, nullable=True),
        sa.Column(
            "changed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )

    op.execute(
        f"""
        CREATE FUNCTION stamp_audit_columns() RETURNS trigger AS $$
        BEGIN
            NEW.changed_by := {actor};
            NEW.changed_at := now();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
        """
    )
    op.execute(
        f"""
        CREATE FUNCTION log_audited_delete() RETURNS trigger AS $$
        BEGIN
            INSERT INTO audit_log (table_name, operation, row_data, changed_by)
            VALUES (TG_TABLE_NAME, TG_OP, to_jsonb(OLD), {actor});
            RETURN OLD;
        END;
        $$ LANGUAGE plpgsql
        """
    )
    for table in _AUDITED_TABLES:
        op.execute(
            f"CREATE TRIGGER trg_{table}_stamp BEFORE INSERT OR UPDATE ON {table} "
            "FOR EACH ROW EXECUTE FUNCTION stamp_audit_columns()"
        )
        op.execute(
            f"CREATE TRIGGER trg_{table}_delete AFTER DELETE ON {table} "
            "FOR EACH ROW EXECUTE FUNCTION log_audited_delete()"
        )


def downgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return

    for table in _AUDITED_TABLES:
        op.execute(f"DROP TRIGGER IF EXISTS trg_{table}_delete ON {table}")
        op.execute(f"DROP TRIGGER IF EXISTS trg_{table}_stamp ON {table}")
    op.execute("DROP FUNCTION IF EXISTS log_audited_delete()")
    op.execute("DROP FUNCTION IF EXISTS stamp_audit_columns()")
    op.drop_table("audit_log")
