"""
Generic async repository with timing logs and cache invalidation.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from sqlalchemy import func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.cache import CacheService
from infrastructure.database.models import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """CRUD over one mapped model inside a caller-owned session.

    Repositories flush but never commit; the caller owns the transaction.
    Errors propagate unchanged so the caller can roll back.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession, cache: Optional[CacheService] = None):
        self.session = session
        self.cache = cache

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    @asynccontextmanager
    async def _timed(self, operation: str) -> AsyncIterator[None]:
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            logger.error(
                "%s.%s failed: %s",
                self.table_name,
                operation,
                e,
                extra={
                    "type": "database",
                    "table": self.table_name,
                    "operation": operation,
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )
            raise
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.debug(
            "%s.%s (%sms)",
            self.table_name,
            operation,
            duration_ms,
            extra={
                "type": "database",
                "table": self.table_name,
                "operation": operation,
                "duration_ms": duration_ms,
            },
        )

    async def find_by_id(self, entity_id: str) -> Optional[ModelT]:
        async with self._timed("find_by_id"):
            return await self.session.get(self.model, entity_id)

    async def find_one(self, **filters: Any) -> Optional[ModelT]:
        async with self._timed("find_one"):
            result = await self.session.execute(select(self.model).filter_by(**filters).limit(1))
            return result.scalars().first()

    async def find_many(self, limit: Optional[int] = None, **filters: Any) -> Sequence[ModelT]:
        async with self._timed("find_many"):
            stmt = select(self.model).filter_by(**filters)
            if limit:
                stmt = stmt.limit(limit)
            result = await self.session.execute(stmt)
            return result.scalars().all()

    async def create(self, **values: Any) -> ModelT:
        async with self._timed("create"):
            entity = self.model(**values)
            self.session.add(entity)
            await self.session.flush()
        await self._invalidate(entity)
        return entity

    async def update(self, entity: ModelT, **values: Any) -> ModelT:
        async with self._timed("update"):
            for key, value in values.items():
                setattr(entity, key, value)
            await self.session.flush()
        await self._invalidate(entity)
        return entity

    async def delete(self, entity_id: str) -> bool:
        entity = await self.find_by_id(entity_id)
        if entity is None:
            return False
        async with self._timed("delete"):
            await self.session.delete(entity)
            await self.session.flush()
        await self._invalidate(entity)
        return True

    async def count(self, **filters: Any) -> int:
        async with self._timed("count"):
            result = await self.session.execute(
                select(func.count()).select_from(self.model).filter_by(**filters)
            )
            return int(result.scalar_one())

    async def _read_through(
        self, key: str, load: Callable[[], Awaitable[Optional[dict[str, Any]]]]
    ) -> Optional[dict[str, Any]]:
        """Cached value for ``key``, else ``load()`` stored under ``key``. Misses are not cached."""
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                return cached

        value = await load()
        if value is not None and self.cache is not None:
            await self.cache.set(key, value)
        return value

    @staticmethod
    def to_snapshot(entity: ModelT) -> dict[str, Any]:
        """Column values as JSON-friendly primitives."""
        data: dict[str, Any] = {}
        for attr in inspect(entity).mapper.column_attrs:
            value = getattr(entity, attr.key)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            data[attr.key] = value
        return data

    def cache_keys(self, entity: ModelT) -> list[str]:
        """Keys to drop when ``entity`` changes; repositories with cached reads override this."""
        return []

    async def _invalidate(self, entity: ModelT) -> None:
        if self.cache is None:
            return
        keys = self.cache_keys(entity)
        if keys:
            await self.cache.delete(*keys)
