"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in src/infrastructure/persistence/ and are
wired at the application boundary.

Query repositories are stateless and safe to share between concurrent
tasks. Command repositories belong to one unit of work and are not.
"""

from .accounts import AccountQueryRepository
from .base import CommandRepository
from .positions import PositionQueryRepository
from .trades import TradeQueryRepository

__all__ = [
    "CommandRepository",
    "AccountQueryRepository",
    "PositionQueryRepository",
    "TradeQueryRepository",
]
