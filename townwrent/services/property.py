"""
Property service for managing listings with business rule validation.
Handles listing submission with image upload, ownership checks, search,
landing page sections and landlord analytics.
"""

from typing import Optional, List, Dict, Any, Mapping, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from townwrent.config import settings
from townwrent.repositories.property import PropertyRepository, PropertySearchFilters
from townwrent.repositories.image import PropertyImageRepository
from townwrent.models.property import Property
from townwrent.models.image import PropertyImage
from townwrent.models.user import User
from townwrent.services.storage import StorageService
from townwrent.services.analytics import compute_analytics
from townwrent.utils.file_utils import FileValidator, ImageFile
from townwrent.utils.validators import validate_listing, validate_listing_changes
from townwrent.utils.exceptions import (
    NotFoundError,
    PropertyNotFoundError,
    PropertyOwnershipError,
    ResourceLimitExceededError,
    ValidationError,
)
import re
import time
import uuid
import logging

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _millis() -> int:
    return int(time.time() * 1000)


class PropertyService:
    """
    Property service for managing listings.
    Validation always runs before the first database or storage call.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[StorageService] = None):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.image_repo = PropertyImageRepository(db_session)
        self.storage = storage or StorageService()
        self.bucket = settings.property_images_bucket
        self.max_images = settings.max_images_per_property

    async def create_listing(
        self,
        form: Mapping[str, Any],
        images: List[ImageFile],
        current_user: User
    ) -> Property:
        """
        Create a listing and upload its photos.

        Args:
            form: Raw listing fields (title, property_type, price, payment_frequency,
                  region, town, landmark, amenities, description)
            images: Photos to attach, in display order
            current_user: Landlord posting the listing

        Returns:
            Created property with its images

        Raises:
            ValidationError: If any field or image is invalid; nothing is written in that case
            StorageError: If an upload fails; uploaded files and the row are rolled back
        """
        cleaned = validate_listing(form, len(images), self.max_images)
        FileValidator.validate_images(images)

        property_obj = await self.property_repo.create({**cleaned, "owner_id": current_user.id})

        uploaded: List[str] = []
        try:
            timestamp = _millis()
            for index, image in enumerate(images):
                path = f"{current_user.id}/{property_obj.id}/{timestamp}-{index}.{image.extension}"
                await self.storage.upload(self.bucket, path, image.content)
                uploaded.append(path)

            await self.image_repo.bulk_create([
                {"property_id": property_obj.id, "storage_path": path, "display_order": index}
                for index, path in enumerate(uploaded)
            ])
        except Exception as e:
            logger.error(f"Listing upload failed for property {property_obj.id}, rolling back: {e}")
            await self.storage.remove(self.bucket, uploaded)
            await self.property_repo.delete(property_obj.id)
            raise

        created = await self.property_repo.get_by_id(property_obj.id)
        logger.info(
            f"Property created by user {current_user.email}: {created.title} "
            f"(ID: {created.id}, images: {len(uploaded)})"
        )
        return created

    async def _get_or_404(self, property_id: uuid.UUID) -> Property:
        property_obj = await self.property_repo.get_by_id(property_id)
        if not property_obj:
            raise PropertyNotFoundError(str(property_id))
        return property_obj

    async def _get_owned(self, property_id: uuid.UUID, current_user: User) -> Property:
        property_obj = await self._get_or_404(property_id)
        if not property_obj.is_owned_by(current_user.id):
            logger.warning(f"User {current_user.id} tried to modify property {property_id} owned by {property_obj.owner_id}")
            raise PropertyOwnershipError()
        return property_obj

    async def get_property(self, property_id: uuid.UUID, viewer: Optional[User] = None) -> Property:
        """
        Get a listing for its detail page.
        Views by anyone other than the owner are counted.

        Raises:
            PropertyNotFoundError: If the listing does not exist
        """
        property_obj = await self._get_or_404(property_id)

        if viewer is None or not property_obj.is_owned_by(viewer.id):
            await self.property_repo.increment_views(property_id)
            property_obj = await self._get_or_404(property_id)

        return property_obj

    async def list_properties(
        self,
        filters: PropertySearchFilters,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Explore/search listings.

        Returns:
            Tuple of (properties for the page, total matches)
        """
        if filters.min_price is not None and filters.max_price is not None and filters.min_price > filters.max_price:
            raise ValidationError("Minimum price cannot be greater than maximum price")

        page = max(page, 1)
        page_size = max(1, min(page_size, settings.max_page_size))
        return await self.property_repo.search_properties(filters, skip=(page - 1) * page_size, limit=page_size)

    async def get_user_properties(self, current_user: User) -> List[Property]:
        return await self.property_repo.get_by_owner(current_user.id)

    async def get_recent_properties(self, limit: int = 4) -> List[Property]:
        return await self.property_repo.get_recent(limit)

    async def get_featured_properties(self, limit: int = 3, strategy: str = "flagged") -> List[Property]:
        try:
            return await self.property_repo.get_featured(limit=limit, strategy=strategy)
        except ValueError as e:
            raise ValidationError(str(e))

    async def update_property(
        self,
        property_id: uuid.UUID,
        changes: Mapping[str, Any],
        current_user: User
    ) -> Property:
        """
        Edit a listing. Only the owner may edit.

        Raises:
            PropertyNotFoundError: If the listing does not exist
            PropertyOwnershipError: If the user is not the owner
            ValidationError: If a required field is blanked or the price is not above 0
        """
        await self._get_owned(property_id, current_user)
        cleaned = validate_listing_changes(changes)
        if not cleaned:
            raise ValidationError("No changes provided")

        # Every key in cleaned was sent by the client, so None here means "clear"
        updated = await self.property_repo.update(property_id, cleaned, exclude_none=False)
        logger.info(f"Property {property_id} updated by {current_user.email}: {sorted(cleaned)}")
        return updated

    async def set_featured(self, property_id: uuid.UUID, is_featured: bool, current_user: User) -> Property:
        await self._get_owned(property_id, current_user)
        # update() skips None but not False
        updated = await self.property_repo.update(property_id, {"is_featured": bool(is_featured)})
        logger.info(f"Property {property_id} featured={is_featured}")
        return updated

    async def add_images(
        self,
        property_id: uuid.UUID,
        images: List[ImageFile],
        current_user: User
    ) -> Property:
        """
        Attach more photos to an existing listing.

        Raises:
            ValidationError: If no image was sent or a file is not a valid image
            ResourceLimitExceededError: If the listing would exceed the image limit
        """
        property_obj = await self._get_owned(property_id, current_user)

        if not images:
            raise ValidationError("Please upload at least one image")
        if property_obj.image_count + len(images) > self.max_images:
            raise ResourceLimitExceededError("Property images", self.max_images)
        FileValidator.validate_images(images)

        next_order = await self.image_repo.next_display_order(property_id)
        timestamp = _millis()
        uploaded: List[str] = []
        try:
            for index, image in enumerate(images):
                safe_name = _UNSAFE_FILENAME_CHARS.sub("_", image.filename).strip("._") or f"image.{image.extension}"
                path = f"{property_id}/{timestamp}-{index}-{safe_name}"
                await self.storage.upload(self.bucket, path, image.content)
                uploaded.append(path)

            await self.image_repo.bulk_create([
                {"property_id": property_id, "storage_path": path, "display_order": next_order + index}
                for index, path in enumerate(uploaded)
            ])
        except Exception as e:
            logger.error(f"Adding images to property {property_id} failed: {e}")
            await self.storage.remove(self.bucket, uploaded)
            raise

        logger.info(f"Added {len(uploaded)} images to property {property_id}")
        return await self._get_or_404(property_id)

    def _storage_path(self, image: PropertyImage) -> Optional[str]:
        """Bucket path of an image, or None for URLs hosted elsewhere."""
        if not image.is_external:
            return image.storage_path
        marker = f"/{self.bucket}/"
        if marker in image.storage_path:
            return self.storage.path_from_url(self.bucket, image.storage_path)
        return None

    async def delete_image(self, property_id: uuid.UUID, image_id: uuid.UUID, current_user: User) -> None:
        """
        Remove one photo; the stored file goes first, then the row.

        Raises:
            NotFoundError: If the image does not belong to the listing
        """
        await self._get_owned(property_id, current_user)

        image = await self.image_repo.get_by_id(image_id)
        if image is None or image.property_id != property_id:
            raise NotFoundError("Property image", str(image_id))

        path = self._storage_path(image)
        if path:
            await self.storage.remove(self.bucket, [path])
        await self.image_repo.delete(image_id)
        logger.info(f"Deleted image {image_id} from property {property_id}")

    async def delete_property(self, property_id: uuid.UUID, current_user: User) -> bool:
        """
        Delete a listing. Stored photos are removed first; image, message and
        site-visit rows follow through the foreign key cascade.
        """
        property_obj = await self._get_owned(property_id, current_user)

        paths = [p for p in (self._storage_path(image) for image in property_obj.images) if p]
        removed = await self.storage.remove(self.bucket, paths)

        deleted = await self.property_repo.delete(property_id)
        logger.info(f"Property {property_id} deleted by {current_user.email} ({removed} files removed)")
        return deleted

    async def get_analytics(self, current_user: User) -> Dict[str, Any]:
        properties = await self.property_repo.get_by_owner(current_user.id)
        return compute_analytics(properties)

    async def ensure_exists(self, property_id: uuid.UUID) -> Property:
        return await self._get_or_404(property_id)

