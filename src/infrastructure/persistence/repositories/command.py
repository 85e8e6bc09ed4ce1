"""Generic SQLAlchemy implementation of CommandRepository.

Each entity module subclasses SqlCommandRepository with its ORM model and
mapping functions. All subclasses created by one unit of work share that
unit of work's AsyncSession.

Attach semantics: update() and remove() accept any domain entity carrying
a primary key. The entity is converted to a fresh ORM row, marked detached
(make_transient_to_detached) and merged with load=False, which places it in
the identity map without a SELECT. If the row is already tracked the merge
copies the incoming values onto the tracked instance instead. Entities
staged by add() and not yet flushed are tracked by object identity and
edited in place.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import make_transient_to_detached
from sqlalchemy.orm.attributes import flag_modified

from src.domain.errors import ArgumentError
from src.domain.repositories.base import CommandRepository
from src.infrastructure.database import Base

D = TypeVar("D", bound=BaseModel)
R = TypeVar("R", bound=Base)

GeneratedKeys = list[tuple[BaseModel, dict[str, Any]]]


class SqlCommandRepository(CommandRepository[D], Generic[D, R]):
    orm_model: ClassVar[type[Base]]
    _to_domain: Callable[[R], D]
    _to_orm: Callable[[D], R]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._added: list[tuple[D, R]] = []
        mapper = inspect(self.orm_model)
        self._key_attrs = [mapper.get_property_by_column(c).key for c in mapper.primary_key]
        self._value_attrs = [
            attr.key for attr in mapper.column_attrs if attr.key not in self._key_attrs
        ]

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    async def find(self, *key: Any) -> D | None:
        if len(key) != len(self._key_attrs):
            raise ArgumentError(
                f"{self.orm_model.__name__} key has {len(self._key_attrs)} column(s), "
                f"got {len(key)} value(s)"
            )
        ident = key[0] if len(key) == 1 else key
        # Staged rows must only reach the server from commit(), after the audit tag.
        with self._session.sync_session.no_autoflush:
            row = await self._session.get(self.orm_model, ident)
        return self._to_domain(row) if row is not None else None

    # ------------------------------------------------------------------ #
    # Staging                                                              #
    # ------------------------------------------------------------------ #

    async def add(self, entity: D) -> None:
        if entity is None:
            raise ArgumentError("entity must not be None")
        if self._pending_row(entity) is not None:
            return
        row = self._to_orm(entity)
        self._session.add(row)
        self._added.append((entity, row))

    async def add_range(self, entities: Iterable[D]) -> None:
        if entities is None:
            raise ArgumentError("entities must not be None")
        with self._session.sync_session.no_autoflush:
            for entity in entities:
                await self.add(entity)

    async def remove(self, entity: D) -> None:
        if entity is None:
            raise ArgumentError("entity must not be None")
        pending = self._pending_row(entity)
        if pending is not None:
            self._forget(entity)
            if inspect(pending).pending:
                self._session.expunge(pending)
            else:
                await self._session.delete(pending)
            return
        row, _ = await self._attach(entity)
        await self._session.delete(row)

    async def remove_range(self, entities: Iterable[D]) -> None:
        if entities is None:
            raise ArgumentError("entities must not be None")
        with self._session.sync_session.no_autoflush:
            for entity in entities:
                await self.remove(entity)

    async def update(self, entity: D) -> None:
        if entity is None:
            raise ArgumentError("entity must not be None")
        pending = self._pending_row(entity)
        if pending is not None:
            fresh = self._to_orm(entity)
            for key in self._present_values(fresh):
                setattr(pending, key, getattr(fresh, key))
            return
        row, keys = await self._attach(entity)
        for key in keys:
            flag_modified(row, key)

    async def update_range(self, entities: Iterable[D]) -> None:
        if entities is None:
            raise ArgumentError("entities must not be None")
        with self._session.sync_session.no_autoflush:
            for entity in entities:
                await self.update(entity)

    # ------------------------------------------------------------------ #
    # Unit-of-work hooks                                                   #
    # ------------------------------------------------------------------ #

    def generated_keys(self) -> GeneratedKeys:
        """Primary key values of every added row, read after a flush."""
        return [
            (entity, {attr: getattr(row, attr) for attr in self._key_attrs})
            for entity, row in self._added
        ]

    def clear_pending(self) -> None:
        self._added.clear()

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    async def _attach(self, entity: D) -> tuple[R, list[str]]:
        row = self._to_orm(entity)
        if any(getattr(row, attr, None) is None for attr in self._key_attrs):
            raise ArgumentError(
                f"{type(entity).__name__} has no primary key; stage it with add() instead"
            )
        keys = self._present_values(row)
        make_transient_to_detached(row)
        return await self._session.merge(row, load=False), keys

    def _present_values(self, row: R) -> list[str]:
        loaded = inspect(row).dict
        return [key for key in self._value_attrs if key in loaded]

    def _pending_row(self, entity: D) -> R | None:
        for staged, row in self._added:
            if staged is entity:
                return row
        return None

    def _forget(self, entity: D) -> None:
        self._added = [(staged, row) for staged, row in self._added if staged is not entity]


def apply_generated_keys(keys: GeneratedKeys) -> None:
    """Copy store-generated key values back onto the domain entities."""
    for entity, values in keys:
        for attr, value in values.items():
            if getattr(entity, attr) != value:
                setattr(entity, attr, value)
