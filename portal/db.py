"""SQLAlchemy 2.x async row store.

The store is an explicitly constructed handle: the API opens it at startup,
closes it at shutdown and hands it to request handlers via ``get_store``.
Each table exposes one-shot ``list/get/insert/update/delete`` operations
that commit (or roll back) their own session.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Generic, Mapping, TypeVar

from fastapi import Request
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from . import models

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=models.Base)


class StoreError(Exception):
    """Raised when a store operation fails at the database level."""
    pass


class RecordNotFound(Exception):
    """Raised when a row with the requested id does not exist."""

    def __init__(self, table: str, row_id: int) -> None:
        super().__init__(f"{table} {row_id} not found")
        self.table = table
        self.row_id = row_id


class Table(Generic[ModelT]):
    """Row operations for one model."""

    def __init__(self, store: RowStore, model: type[ModelT], *, order_by: str | None = None) -> None:
        self.store = store
        self.model = model
        self.name = model.__tablename__
        self.order_by = order_by

    async def list(self) -> list[ModelT]:
        """All rows, in the table's default order."""
        query = select(self.model)
        if self.order_by:
            query = query.order_by(getattr(self.model, self.order_by), self.model.id)
        try:
            async with self.store.session() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list {self.name}: {e}") from e

    async def get(self, row_id: int) -> ModelT | None:
        try:
            async with self.store.session() as session:
                return await session.get(self.model, row_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read {self.name} {row_id}: {e}") from e

    async def insert(self, fields: Mapping[str, Any]) -> ModelT:
        row = self.model(**fields)
        try:
            async with self.store.session() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to insert into {self.name}: {e}") from e

        logger.info(f"Inserted {self.name} {row.id}")
        return row

    async def update(self, row_id: int, fields: Mapping[str, Any]) -> ModelT:
        try:
            async with self.store.session() as session:
                row = await session.get(self.model, row_id)
                if row is None:
                    raise RecordNotFound(self.name, row_id)
                for key, value in fields.items():
                    setattr(row, key, value)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update {self.name} {row_id}: {e}") from e

        logger.info(f"Updated {self.name} {row_id}")
        return row

    async def delete(self, row_id: int) -> None:
        try:
            async with self.store.session() as session:
                row = await session.get(self.model, row_id)
                if row is None:
                    raise RecordNotFound(self.name, row_id)
                await session.delete(row)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete {self.name} {row_id}: {e}") from e

        logger.info(f"Deleted {self.name} {row_id}")


class RowStore:
    """Async engine plus per-entity tables.

    Usage:
        store = RowStore(settings.db.url)
        await store.open(create_all=True)
        rows = await store.orders.list()
        await store.close()
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

        self.products: Table[models.Product] = Table(self, models.Product, order_by="name")
        self.manufacturers: Table[models.Manufacturer] = Table(self, models.Manufacturer, order_by="name")
        self.orders: Table[models.Order] = Table(self, models.Order, order_by="created_at")

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StoreError("Row store is not open")
        return self._engine

    def _engine_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"echo": self.echo}
        # In-memory SQLite lives on a single connection
        if self.url.startswith("sqlite") and (":memory:" in self.url or self.url.endswith("://")):
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        return kwargs

    async def open(self, *, create_all: bool = False) -> None:
        """Create the engine and, optionally, any missing tables."""
        if self.is_open:
            return

        self._engine = create_async_engine(self.url, **self._engine_kwargs())
        self._sessionmaker = async_sessionmaker(bind=self._engine, expire_on_commit=False, class_=AsyncSession)

        if create_all:
            async with self._engine.begin() as conn:
                await conn.run_sync(models.Base.metadata.create_all)

        logger.info(f"Row store opened: {self.url.split('@')[-1]}")

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Row store closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessionmaker is None:
            raise StoreError("Row store is not open")
        async with self._sessionmaker() as session:
            yield session

    async def ping(self) -> bool:
        """True when the database answers a trivial query."""
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, StoreError) as e:
            logger.warning(f"Database ping failed: {e}")
            return False


def get_store(request: Request) -> RowStore:
    """FastAPI dependency returning the store opened in the app lifespan.

    Usage:
        async def endpoint(store: RowStore = Depends(get_store)):
            ...
    """
    return request.app.state.store
