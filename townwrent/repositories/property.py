"""
Property repository for listings with search and filtering.
Backs the explore page, the landing page sections and the landlord dashboard.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc, update
from townwrent.repositories.base import BaseRepository
from townwrent.models.property import Property, PropertyType
from typing import Optional, List, Tuple
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)


FEATURED_BY_FLAG = "flagged"
FEATURED_BY_PRICE = "price"
FEATURED_RANDOM = "random"
FEATURED_STRATEGIES = (FEATURED_BY_FLAG, FEATURED_BY_PRICE, FEATURED_RANDOM)


class PropertySearchFilters:
    """Data class for property search filters."""

    def __init__(
        self,
        region: Optional[str] = None,
        town: Optional[str] = None,
        property_type: Optional[PropertyType] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        search_text: Optional[str] = None,
        owner_id: Optional[uuid.UUID] = None,
        available: Optional[bool] = True
    ):
        self.region = region
        self.town = town
        self.property_type = property_type
        self.min_price = min_price
        self.max_price = max_price
        self.search_text = search_text
        self.owner_id = owner_id
        self.available = available


class PropertyRepository(BaseRepository[Property]):
    """Repository for property listings."""

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Search properties with filtering and pagination, newest first.

        Args:
            filters: PropertySearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return

        Returns:
            Tuple of (properties list, total count)
        """
        try:
            query = select(Property)
            count_query = select(func.count(Property.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar() or 0

            query = query.order_by(desc(Property.created_at)).offset(skip).limit(limit)
            result = await self.db.execute(query)
            properties = list(result.scalars().all())

            logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
            return properties, total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        conditions = []

        if filters.available is not None:
            conditions.append(Property.available == filters.available)

        if filters.region:
            conditions.append(Property.region.ilike(filters.region.strip()))
        if filters.town:
            conditions.append(Property.town.ilike(f"%{filters.town.strip()}%"))

        if filters.property_type is not None:
            conditions.append(Property.property_type == filters.property_type)

        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.owner_id is not None:
            conditions.append(Property.owner_id == filters.owner_id)

        # Free-text search over the listing's text and location columns
        if filters.search_text and filters.search_text.strip():
            pattern = f"%{filters.search_text.strip()}%"
            conditions.append(
                or_(
                    Property.title.ilike(pattern),
                    Property.description.ilike(pattern),
                    Property.region.ilike(pattern),
                    Property.town.ilike(pattern),
                    Property.landmark.ilike(pattern)
                )
            )

        return conditions

    async def get_by_owner(self, owner_id: uuid.UUID) -> List[Property]:
        """All listings of one landlord, newest first, regardless of availability."""
        try:
            query = (
                select(Property)
                .where(Property.owner_id == owner_id)
                .order_by(desc(Property.created_at))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get properties for owner {owner_id}: {e}")
            raise

    async def get_recent(self, limit: int = 4) -> List[Property]:
        try:
            query = (
                select(Property)
                .where(Property.available.is_(True))
                .order_by(desc(Property.created_at))
                .limit(limit)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get recent properties: {e}")
            raise

    async def get_featured(self, limit: int = 3, strategy: str = FEATURED_BY_FLAG) -> List[Property]:
        """
        Pick listings for the landing page.

        Args:
            limit: Maximum number of listings
            strategy: "flagged" (is_featured set), "price" (most expensive first) or "random"

        Raises:
            ValueError: On an unknown strategy
        """
        if strategy not in FEATURED_STRATEGIES:
            raise ValueError(f"Unknown featured strategy: {strategy}")

        try:
            query = select(Property).where(Property.available.is_(True))
            if strategy == FEATURED_BY_FLAG:
                query = query.where(Property.is_featured.is_(True)).order_by(desc(Property.created_at))
            elif strategy == FEATURED_BY_PRICE:
                query = query.order_by(desc(Property.price), desc(Property.created_at))
            else:
                query = query.order_by(func.random())

            result = await self.db.execute(query.limit(limit))
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get featured properties: {e}")
            raise

    async def increment_views(self, property_id: uuid.UUID) -> None:
        """Atomically bump the view counter."""
        try:
            stmt = (
                update(Property)
                .where(Property.id == property_id)
                .values(views=Property.views + 1)
            )
            await self.db.execute(stmt)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to increment views for property {property_id}: {e}")
            raise
