"""
Bucket-style object storage on the local filesystem.

Objects live under ``<storage_root>/<bucket>/<path>`` and are served read-only at
``<public_base_url>/storage/v1/object/public/<bucket>/<path>``.
"""

from pathlib import Path
from typing import Iterable, Optional
import aiofiles
import aiofiles.os
import logging

from townwrent.config import settings
from townwrent.utils.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

PUBLIC_OBJECT_PREFIX = "/storage/v1/object/public"


class StorageService:
    """Upload, remove and address files in named buckets."""

    def __init__(
        self,
        root: Optional[str] = None,
        public_base_url: Optional[str] = None,
        fallback_image_url: Optional[str] = None
    ):
        self.root = Path(root or settings.storage_root)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")
        self.fallback_image_url = fallback_image_url or settings.fallback_image_url

    def _object_path(self, bucket: str, path: str) -> Path:
        """
        Map a bucket path to a file below the bucket directory.

        Raises:
            ValidationError: If the path is empty or escapes the bucket
        """
        cleaned = (path or "").strip().lstrip("/")
        if not cleaned:
            raise ValidationError("Storage path is required")

        bucket_dir = (self.root / bucket).resolve()
        target = (bucket_dir / cleaned).resolve()
        if bucket_dir != target and bucket_dir not in target.parents:
            raise ValidationError(f"Invalid storage path: {path}")
        return target

    async def upload(self, bucket: str, path: str, content: bytes, upsert: bool = False) -> str:
        """
        Store bytes at ``path`` inside ``bucket``.

        Args:
            bucket: Bucket name
            path: Object path inside the bucket
            content: File bytes
            upsert: Overwrite an existing object instead of failing

        Returns:
            The stored path

        Raises:
            StorageError: If the object exists (without upsert) or the write fails
        """
        target = self._object_path(bucket, path)

        if not upsert and await aiofiles.os.path.exists(target):
            raise StorageError(f"Object already exists: {bucket}/{path}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Failed to write {bucket}/{path}: {e}")
            raise StorageError(str(e))

        logger.debug(f"Stored {len(content)} bytes at {bucket}/{path}")
        return path

    async def remove(self, bucket: str, paths: Iterable[str]) -> int:
        """
        Remove objects; missing ones are skipped.

        Returns:
            Number of objects actually removed
        """
        removed = 0
        for path in paths:
            if not path:
                continue
            target = self._object_path(bucket, path)
            try:
                await aiofiles.os.remove(target)
                removed += 1
            except FileNotFoundError:
                logger.debug(f"Object {bucket}/{path} already gone")
            except OSError as e:
                logger.error(f"Failed to remove {bucket}/{path}: {e}")
                raise StorageError(str(e))
        return removed

    async def exists(self, bucket: str, path: str) -> bool:
        return await aiofiles.os.path.exists(self._object_path(bucket, path))

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}{PUBLIC_OBJECT_PREFIX}/{bucket}/{path.lstrip('/')}"

    def path_from_url(self, bucket: str, url_or_path: str) -> str:
        """
        Recover the object path from a public URL.

        Anything after ``/<bucket>/`` is the path; input without that marker
        is assumed to already be a path and returned unchanged.
        """
        marker = f"/{bucket}/"
        if marker in url_or_path:
            return url_or_path.split(marker, 1)[1]
        return url_or_path

    def resolve_image_url(self, path: Optional[str], bucket: Optional[str] = None) -> str:
        """
        Turn a stored image reference into something a browser can load.

        Empty references fall back to a placeholder photo, absolute ``http``
        URLs pass through untouched, bucket paths become public URLs.
        """
        if not path:
            return self.fallback_image_url
        if path.startswith("http"):
            return path
        return self.get_public_url(bucket or settings.property_images_bucket, path)
