"""
Tests for bucket storage and public URL handling.
"""

import pytest

from townwrent.config import settings
from townwrent.services.storage import StorageService, PUBLIC_OBJECT_PREFIX
from townwrent.utils.exceptions import StorageError, ValidationError

BUCKET = "property-images"


class TestStorageService:

    async def test_upload_exists_remove(self, storage: StorageService):
        path = await storage.upload(BUCKET, "owner/prop/1-0.png", b"bytes")

        assert path == "owner/prop/1-0.png"
        assert await storage.exists(BUCKET, path)
        assert (storage.root / BUCKET / "owner" / "prop" / "1-0.png").read_bytes() == b"bytes"

        assert await storage.remove(BUCKET, [path, "owner/prop/missing.png"]) == 1
        assert not await storage.exists(BUCKET, path)

    async def test_upload_refuses_overwrite_without_upsert(self, storage: StorageService):
        await storage.upload(BUCKET, "a.png", b"first")

        with pytest.raises(StorageError, match="already exists"):
            await storage.upload(BUCKET, "a.png", b"second")

        await storage.upload(BUCKET, "a.png", b"second", upsert=True)
        assert (storage.root / BUCKET / "a.png").read_bytes() == b"second"

    @pytest.mark.parametrize("path", ["../escape.png", "nested/../../escape.png", "", "   "])
    async def test_rejects_paths_outside_bucket(self, storage: StorageService, path):
        with pytest.raises(ValidationError):
            await storage.upload(BUCKET, path, b"x")

    def test_public_url_and_path_round_trip(self, storage: StorageService):
        url = storage.get_public_url("avatars", "user-1/123.png")

        assert url == f"http://test{PUBLIC_OBJECT_PREFIX}/avatars/user-1/123.png"
        assert storage.path_from_url("avatars", url) == "user-1/123.png"
        assert storage.path_from_url("avatars", "user-1/123.png") == "user-1/123.png"

    def test_resolve_image_url(self, storage: StorageService):
        assert storage.resolve_image_url(None) == settings.fallback_image_url
        assert storage.resolve_image_url("") == settings.fallback_image_url
        assert storage.resolve_image_url("https://cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"
        assert storage.resolve_image_url("owner/prop/a.jpg") == (
            f"http://test{PUBLIC_OBJECT_PREFIX}/{settings.property_images_bucket}/owner/prop/a.jpg"
        )
