"""
Site visit repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from townwrent.repositories.base import BaseRepository
from townwrent.models.site_visit import SiteVisit
from townwrent.models.property import Property
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)


class SiteVisitRepository(BaseRepository[SiteVisit]):

    def __init__(self, db: AsyncSession):
        super().__init__(SiteVisit, db)

    async def get_for_owner(self, owner_id: uuid.UUID) -> List[SiteVisit]:
        """Visits booked on any listing of the given landlord, soonest first."""
        try:
            query = (
                select(SiteVisit)
                .join(Property, SiteVisit.property_id == Property.id)
                .where(Property.owner_id == owner_id)
                .order_by(SiteVisit.visit_date, desc(SiteVisit.created_at))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get site visits for owner {owner_id}: {e}")
            raise
