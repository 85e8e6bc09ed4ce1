"""ORM model registry: imports all layer modules so every mapper class is
registered with Base.metadata before Alembic or SQLAlchemy runs.

Import order follows the dependency graph (referenced tables first).
"""

from src.infrastructure.persistence.models.reference import Account
from src.infrastructure.persistence.models.trading import Position, Trade

__all__ = [
    # Reference
    "Account",
    # Trading
    "Position",
    "Trade",
]
