"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic autogenerate and SQLAlchemy mapper configuration)
and exports the repository implementations and the unit of work.
"""

from src.infrastructure.persistence.models import *  # noqa: F401, F403
from src.infrastructure.persistence.models import __all__ as _orm_all
from src.infrastructure.persistence.blocking import BlockingUnitOfWork
from src.infrastructure.persistence.repositories import (
    QueryRepositories,
    SqlAccountCommandRepository,
    SqlAccountQueryRepository,
    SqlPositionCommandRepository,
    SqlPositionQueryRepository,
    SqlTradeCommandRepository,
    SqlTradeQueryRepository,
    get_query_repositories,
)
from src.infrastructure.persistence.unit_of_work import (
    SqlUnitOfWork,
    TransactionScope,
    TransactionStatus,
)

__all__ = _orm_all + [
    "BlockingUnitOfWork",
    "QueryRepositories",
    "SqlAccountCommandRepository",
    "SqlAccountQueryRepository",
    "SqlPositionCommandRepository",
    "SqlPositionQueryRepository",
    "SqlTradeCommandRepository",
    "SqlTradeQueryRepository",
    "SqlUnitOfWork",
    "TransactionScope",
    "TransactionStatus",
    "get_query_repositories",
]
