"""
File upload utilities for image validation.
Uploaded files are read once into ImageFile objects so services never touch UploadFile.
"""

import io
import mimetypes
from pathlib import Path
from typing import List, Optional
from PIL import Image, UnidentifiedImageError
from fastapi import UploadFile

from townwrent.config import settings
from townwrent.utils.exceptions import (
    ValidationError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)


class ImageFile:
    """An uploaded file held in memory."""

    def __init__(self, filename: str, content: bytes, content_type: Optional[str] = None):
        self.filename = filename or "upload"
        self.content = content
        self.content_type = content_type or mimetypes.guess_type(self.filename)[0] or ""

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        """Lower-case extension without the dot, derived from the filename or the MIME type."""
        suffix = Path(self.filename).suffix.lower().lstrip(".")
        if suffix:
            return suffix
        guessed = mimetypes.guess_extension(self.content_type or "") or ".jpg"
        return guessed.lstrip(".")

    def __repr__(self) -> str:
        return f"<ImageFile(filename={self.filename}, type={self.content_type}, size={self.size})>"


async def read_upload(file: UploadFile) -> ImageFile:
    """Read a multipart upload into memory."""
    await file.seek(0)
    content = await file.read()
    return ImageFile(filename=file.filename or "", content=content, content_type=file.content_type)


async def read_uploads(files: Optional[List[UploadFile]]) -> List[ImageFile]:
    # Browsers send an empty part when no file is chosen
    return [await read_upload(f) for f in (files or []) if f is not None and f.filename]


class FileValidator:
    """Utility class for image validation."""

    @classmethod
    def validate_image(cls, image: ImageFile, max_size: Optional[int] = None) -> ImageFile:
        """
        Check that a file is a non-empty image under the size limit.

        Args:
            image: File to validate
            max_size: Maximum allowed size in bytes (defaults to the configured limit)

        Returns:
            The same file

        Raises:
            UnsupportedFileTypeError: If the MIME type is not image/*
            FileSizeExceededError: If the file is too large
            ValidationError: If the file is empty or cannot be decoded as an image
        """
        if not (image.content_type or "").startswith("image/"):
            raise UnsupportedFileTypeError(image.content_type or "unknown")

        if image.size <= 0:
            raise ValidationError(f"File '{image.filename}' is empty")

        max_allowed = max_size or settings.max_file_size
        if image.size > max_allowed:
            raise FileSizeExceededError(image.size, max_allowed)

        try:
            with Image.open(io.BytesIO(image.content)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(f"Invalid image file '{image.filename}': {str(e)}")

        return image

    @classmethod
    def validate_images(cls, images: List[ImageFile], max_size: Optional[int] = None) -> List[ImageFile]:
        return [cls.validate_image(image, max_size) for image in images]
