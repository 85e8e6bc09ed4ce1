"""Domain services package."""

from .performance import PerformanceService
from .positions import PositionService

__all__ = ["PerformanceService", "PositionService"]
