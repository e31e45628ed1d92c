"""
Object storage for image bytes.
Supabase Storage in deployed environments, a dictionary in development and tests.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple
import uuid

from supabase import Client, create_client

from photohub.domain.models.image import Image, ImageFormat, UploadImage

logger = logging.getLogger(__name__)


class ImageStorageError(Exception):
    """Raised when the storage backend fails."""


class ImageReferenceUrlBuilder:
    """Builds the public URL under which an image is served by this API."""

    def __init__(self, image_by_id_endpoint_url: str):
        self.base_url = image_by_id_endpoint_url.rstrip("/")

    def build(self, image_id: uuid.UUID) -> str:
        return f"{self.base_url}/{image_id}"


class ImageStorage(ABC):

    @abstractmethod
    async def upload_image(self, image_id: uuid.UUID, upload_image: UploadImage) -> str:
        """Store image bytes and return the object's location."""
        pass

    @abstractmethod
    async def download_image(self, image_id: uuid.UUID) -> Optional[Image]:
        """Return the stored image, or None if nothing is stored under the id."""
        pass


class InMemoryImageStorage(ImageStorage):

    def __init__(self):
        self._images: Dict[uuid.UUID, Tuple[str, ImageFormat, bytes]] = {}

    async def upload_image(self, image_id: uuid.UUID, upload_image: UploadImage) -> str:
        self._images[image_id] = (upload_image.filename, upload_image.format, upload_image.content)
        return f"memory://images/{image_id}"

    async def download_image(self, image_id: uuid.UUID) -> Optional[Image]:
        stored = self._images.get(image_id)
        if stored is None:
            return None
        filename, image_format, content = stored
        return Image(id=image_id, filename=filename, format=image_format, content=content)


class SupabaseImageStorage(ImageStorage):
    """Stores images in a Supabase Storage bucket, keyed by image id."""

    def __init__(self, supabase_client: Client, bucket: str = "images"):
        self.client = supabase_client
        self.bucket = bucket

    @classmethod
    def from_credentials(cls, supabase_url: str, service_key: str, bucket: str = "images") -> "SupabaseImageStorage":
        return cls(create_client(supabase_url, service_key), bucket)

    def _path(self, image_id: uuid.UUID, image_format: ImageFormat) -> str:
        return f"{image_id}.{image_format.value}"

    async def upload_image(self, image_id: uuid.UUID, upload_image: UploadImage) -> str:
        path = self._path(image_id, upload_image.format)
        try:
            # The Supabase client is synchronous
            await asyncio.to_thread(
                self.client.storage.from_(self.bucket).upload,
                path=path,
                file=upload_image.content,
                file_options={
                    "content-type": upload_image.format.mime_type,
                    "cache-control": "private, max-age=3600",
                    "upsert": "true",
                },
            )
        except Exception as e:
            raise ImageStorageError(f"Failed to upload image {image_id}: {e}") from e

        logger.info(f"Uploaded image {image_id} to bucket {self.bucket}")
        return f"{self.bucket}/{path}"

    async def download_image(self, image_id: uuid.UUID) -> Optional[Image]:
        bucket = self.client.storage.from_(self.bucket)
        try:
            listing = await asyncio.to_thread(bucket.list, "", {"search": str(image_id), "limit": 1})
        except Exception as e:
            raise ImageStorageError(f"Failed to look up image {image_id}: {e}") from e

        if not listing:
            return None

        name = listing[0]["name"]
        extension = name.rsplit(".", 1)[-1]
        try:
            content = await asyncio.to_thread(bucket.download, name)
        except Exception as e:
            raise ImageStorageError(f"Failed to download image {image_id}: {e}") from e

        return Image(id=image_id, filename=name, format=ImageFormat(extension), content=content)


def create_image_storage(settings) -> ImageStorage:
    if settings.storage_backend == "supabase":
        logger.info(f"Using Supabase image storage bucket {settings.image_bucket}")
        return SupabaseImageStorage.from_credentials(
            settings.supabase_url, settings.supabase_service_key, settings.image_bucket
        )
    logger.info("Using in-memory image storage")
    return InMemoryImageStorage()
