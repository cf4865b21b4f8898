"""Validation and preparation of uploaded food images."""

import io
import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

from fastapi import UploadFile
from PIL import Image

from foodprint.config import settings


logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")

MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

ALLOWED_EXTENSIONS = tuple(MEDIA_TYPES)


class ImageValidationError(ValueError):
    """Uploaded image failed validation; carries the offending form field."""

    def __init__(self, message: str, field: str = "image"):
        super().__init__(message)
        self.field = field


@dataclass(frozen=True)
class ImagePayload:
    """A validated image ready for the vision generator."""

    data: bytes
    media_type: str
    file_name: str


class ImageService:
    """Service for validating and preparing image uploads."""

    def __init__(
        self,
        max_size_mb: int = settings.max_image_size_mb,
        max_width: int = settings.max_image_width,
    ):
        self.max_size_bytes = max_size_mb * 1024 * 1024
        self.max_width = max_width

    async def read_upload(self, file: Optional[UploadFile]) -> ImagePayload:
        """
        Read and validate an uploaded image.

        Args:
            file: Uploaded file from FastAPI

        Returns:
            ImagePayload with the raw bytes and media type

        Raises:
            ImageValidationError: If the file is missing, empty, too large
                or not a supported image type
        """
        if file is None or not file.filename:
            raise ImageValidationError("Image file is required and cannot be empty")

        contents = await file.read()
        return self.validate(file.filename, file.content_type, contents)

    def validate(
        self, file_name: str, content_type: Optional[str], data: bytes
    ) -> ImagePayload:
        if not data:
            raise ImageValidationError("Image file is required and cannot be empty")

        if (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
            raise ImageValidationError(
                f"Unsupported image format: {content_type}. "
                "Allowed formats: JPEG, PNG, GIF, WebP"
            )

        if len(data) > self.max_size_bytes:
            raise ImageValidationError(
                f"Image file must be smaller than {self.max_size_bytes // (1024 * 1024)}MB"
            )

        extension = PurePath(file_name).suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise ImageValidationError(f"Unsupported image format: {extension or file_name}")

        return ImagePayload(
            data=data, media_type=MEDIA_TYPES[extension], file_name=file_name
        )

    def prepare_for_upload(self, image: ImagePayload) -> ImagePayload:
        """
        Downscale wide images before sending them to the vision model.

        Images Pillow cannot read, or that are already small enough, are
        returned unchanged.

        Raises:
            ImageValidationError: If the pixel count exceeds Pillow's
                decompression bomb limit
        """
        try:
            with Image.open(io.BytesIO(image.data)) as img:
                if img.width <= self.max_width:
                    return image

                image_format = img.format
                ratio = self.max_width / img.width
                new_height = max(1, int(img.height * ratio))
                resized = img.resize(
                    (self.max_width, new_height), Image.Resampling.LANCZOS
                )

                buffer = io.BytesIO()
                resized.save(buffer, format=image_format, optimize=True)
        except Image.DecompressionBombError as e:
            logger.warning("Rejected oversized image %s: %s", image.file_name, e)
            raise ImageValidationError("Image dimensions are too large") from e
        except (OSError, ValueError) as e:
            # Keep original if it can't be re-encoded
            logger.warning("Could not downscale image %s: %s", image.file_name, e)
            return image

        logger.debug(
            "Downscaled %s to width %d (%d -> %d bytes)",
            image.file_name,
            self.max_width,
            len(image.data),
            buffer.tell(),
        )
        return ImagePayload(
            data=buffer.getvalue(),
            media_type=image.media_type,
            file_name=image.file_name,
        )


# Singleton instance
image_service = ImageService()
