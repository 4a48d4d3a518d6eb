"""
Repository for PropertyImage rows.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from townwrent.repositories.base import BaseRepository
from townwrent.models.image import PropertyImage
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyImageRepository(BaseRepository[PropertyImage]):

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyImage, db)

    async def get_by_property_id(self, property_id: uuid.UUID) -> List[PropertyImage]:
        """Images of a property in display order."""
        try:
            query = (
                select(PropertyImage)
                .where(PropertyImage.property_id == property_id)
                .order_by(PropertyImage.display_order, PropertyImage.created_at)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get images for property {property_id}: {e}")
            raise

    async def count_by_property_id(self, property_id: uuid.UUID) -> int:
        return await self.count({"property_id": property_id})

    async def next_display_order(self, property_id: uuid.UUID) -> int:
        try:
            query = select(func.max(PropertyImage.display_order)).where(
                PropertyImage.property_id == property_id
            )
            result = await self.db.execute(query)
            current = result.scalar()
            return 0 if current is None else current + 1
        except Exception as e:
            logger.error(f"Failed to get next display order for property {property_id}: {e}")
            raise
