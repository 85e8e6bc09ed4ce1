"""Generic command repository interface.

CommandRepository[T] is the write-side abstraction: it stages inserts,
updates and deletes against the session owned by a unit of work. Concrete
implementations live in src/infrastructure/persistence/ and are created by
the unit of work, never directly by services.

Design notes:
  - No method commits. Staged changes reach the store when the owning unit
    of work commits.
  - find() hands back a detached copy. update() and remove() attach the
    entity they receive first, so a found entity can be passed straight back.
  - A None entity or collection raises ArgumentError before the session is
    touched.
  - Range methods suspend autoflush for the loop and restore it on every
    exit path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class CommandRepository(ABC, Generic[T]):
    """Abstract write interface for one entity type."""

    @abstractmethod
    async def find(self, *key: Any) -> T | None:
        """Return the entity with the given primary key values, or None."""

    @abstractmethod
    async def add(self, entity: T) -> None:
        """Stage the entity for insertion."""

    @abstractmethod
    async def add_range(self, entities: Iterable[T]) -> None:
        """Stage every entity for insertion."""

    @abstractmethod
    async def remove(self, entity: T) -> None:
        """Attach the entity if needed and stage it for deletion."""

    @abstractmethod
    async def remove_range(self, entities: Iterable[T]) -> None:
        """Attach and stage every entity for deletion."""

    @abstractmethod
    async def update(self, entity: T) -> None:
        """Attach the entity if needed and stage all its fields as modified."""

    @abstractmethod
    async def update_range(self, entities: Iterable[T]) -> None:
        """Attach and stage every entity as modified."""
