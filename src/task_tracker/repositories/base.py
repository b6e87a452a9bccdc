"""Persistence primitives shared by the task and user repositories."""

from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar, Generic, TypeVar

from sqlalchemy import func
from sqlalchemy.sql import ColumnElement
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Wrap one request's session for a single table model.

    Repositories flush but never commit; the calling service owns the
    transaction boundary.
    """

    model: ClassVar[type[SQLModel]]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def get(self, entity_id: int) -> ModelType | None:
        return await self._session.get(self.model, entity_id)

    async def count_where(self, conditions: Sequence[ColumnElement[bool]]) -> int:
        """Number of rows satisfying every condition in ``conditions``."""
        statement = select(func.count()).select_from(self.model).where(*conditions)
        return int((await self._session.execute(statement)).scalar_one())

    async def add(self, instance: ModelType) -> ModelType:
        """Stage ``instance`` and flush so its primary key is assigned."""
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def delete(self, instance: ModelType) -> None:
        await self._session.delete(instance)
        await self._session.flush()

    async def refresh(self, instance: ModelType) -> ModelType:
        await self._session.refresh(instance)
        return instance
