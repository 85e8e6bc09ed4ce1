"""Domain model package.

All domain objects are pure Pydantic models with no ORM or infrastructure
dependencies. Import from this package to avoid coupling application code
to individual module paths.
"""

from .accounts import Account
from .positions import Position
from .trades import Trade

__all__ = ["Account", "Position", "Trade"]
