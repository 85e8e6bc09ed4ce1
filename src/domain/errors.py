"""Domain-level exceptions raised by repositories and units of work.

Store failures (lost connections, constraint violations) are not wrapped:
they reach the caller as the driver / SQLAlchemy exception that caused them.
A missing row is never an error; lookups return None or an empty list.
"""


class RepositoryError(Exception):
    """Base class for errors raised by the data-access layer itself."""


class ArgumentError(RepositoryError, ValueError):
    """A command received a missing entity, collection or primary key."""


class TransactionStateError(RepositoryError, RuntimeError):
    """A transaction operation is invalid for the unit of work's current state."""


class UnresolvedTransactionError(TransactionStateError):
    """A transaction handle was released without commit or rollback."""
