"""
Generic async repository shared by every table.

All tables use a UUID ``id`` primary key. Each mutating call runs in its own
transaction: it commits on success and rolls back and re-raises on failure.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from townwrent.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type
from contextlib import asynccontextmanager
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    @property
    def name(self) -> str:
        return self.model.__name__

    @asynccontextmanager
    async def _transaction(self, action: str):
        """Commit the work done inside the block, or roll back and log what failed."""
        try:
            yield
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to {action} {self.name}: {e}")
            raise

    def _where_equal(self, query, filters: Optional[Dict[str, Any]]):
        for field, value in (filters or {}).items():
            query = query.where(getattr(self.model, field) == value)
        return query

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**obj_in)
        async with self._transaction("create"):
            self.db.add(db_obj)
        await self.db.refresh(db_obj)
        logger.debug(f"Created {self.name} {db_obj.id}")
        return db_obj

    async def bulk_create(self, objects_in: List[Dict[str, Any]]) -> List[ModelType]:
        """Insert several rows in one transaction."""
        db_objects = [self.model(**data) for data in objects_in]
        async with self._transaction("bulk create"):
            self.db.add_all(db_objects)
        for obj in db_objects:
            await self.db.refresh(obj)
        return db_objects

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        """
        Fetch one row. Already-loaded instances are overwritten with the
        database state, so counters bumped by UPDATE statements show up.
        """
        query = (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def update(
        self,
        id: uuid.UUID,
        obj_in: Dict[str, Any],
        exclude_none: bool = True
    ) -> Optional[ModelType]:
        """
        Set attributes on a row.

        Args:
            id: Row id
            obj_in: Attribute values
            exclude_none: Skip keys mapped to None instead of writing NULL

        Returns:
            The refreshed row, or None if it does not exist
        """
        db_obj = await self.get_by_id(id)
        if db_obj is None:
            return None

        changes = {k: v for k, v in obj_in.items() if v is not None or not exclude_none}
        if not changes:
            return db_obj

        async with self._transaction("update"):
            for field, value in changes.items():
                setattr(db_obj, field, value)
        await self.db.refresh(db_obj)
        logger.debug(f"Updated {self.name} {id}: {sorted(changes)}")
        return db_obj

    async def delete(self, id: uuid.UUID) -> bool:
        """
        Delete by id with a single DELETE; dependent rows go through the
        foreign key cascade.

        Returns:
            True if a row was removed
        """
        async with self._transaction("delete"):
            result = await self.db.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        query = self._where_equal(select(func.count(self.model.id)), filters)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def exists(self, id: uuid.UUID) -> bool:
        return await self.count({"id": id}) > 0
