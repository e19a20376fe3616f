"""Thin data-access layer shared by every feature.

Repositories wrap a Tortoise model and hand back frozen pydantic rows, so
callers (the report engine in particular) work on plain snapshots and never
touch ORM instances.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from tortoise.exceptions import DBConnectionError
from tortoise.models import Model
from tortoise.queryset import QuerySet

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Model)
RowT = TypeVar("RowT", bound=BaseModel)
T = TypeVar("T")

MAX_READ_ATTEMPTS = 3
RETRY_BASE_DELAY = 0.1


@dataclass(frozen=True)
class QueryOptions:
    limit: Optional[int] = None
    offset: Optional[int] = None
    order_by: Optional[str] = None
    ascending: bool = True


async def with_retry(operation: Callable[[], Awaitable[T]], description: str) -> T:
    """Runs ``operation``, retrying transient connection failures with backoff."""
    attempt = 1
    while True:
        try:
            return await operation()
        except DBConnectionError as e:
            if attempt >= MAX_READ_ATTEMPTS:
                logger.error(f"{description} failed after {attempt} attempts: {e}")
                raise
            delay = RETRY_BASE_DELAY * (2 ** (attempt - 1))
            logger.warning(f"{description} failed ({e}); retrying in {delay:.2f}s")
            await asyncio.sleep(delay)
            attempt += 1


class BaseRepository(Generic[ModelT, RowT]):
    """Read operations common to every table."""

    model: Type[ModelT]
    row_schema: Type[RowT]
    default_order: Optional[str] = None

    def to_row(self, instance: ModelT) -> RowT:
        return self.row_schema.model_validate(instance)

    def _apply_options(self, query: QuerySet, options: Optional[QueryOptions]) -> QuerySet:
        options = options or QueryOptions()
        order_by = options.order_by or self.default_order
        if order_by:
            query = query.order_by(order_by if options.ascending else f"-{order_by}")
        if options.offset:
            query = query.offset(options.offset)
        if options.limit:
            query = query.limit(options.limit)
        return query

    async def find_by_id(self, record_id: str) -> Optional[RowT]:
        async def _fetch():
            return await self.model.get_or_none(id=record_id)

        instance = await with_retry(_fetch, f"{self.model.__name__}.find_by_id")
        return self.to_row(instance) if instance else None

    async def find_all(self, options: Optional[QueryOptions] = None) -> List[RowT]:
        return await self.find_by({}, options)

    async def find_by(
        self, filters: Dict[str, Any], options: Optional[QueryOptions] = None
    ) -> List[RowT]:
        async def _fetch():
            return await self._apply_options(self.model.filter(**filters), options)

        instances = await with_retry(_fetch, f"{self.model.__name__}.find_by")
        return [self.to_row(instance) for instance in instances]

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        async def _count():
            return await self.model.filter(**(filters or {})).count()

        return await with_retry(_count, f"{self.model.__name__}.count")
