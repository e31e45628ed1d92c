"""
Photo repository interface.
Defines the contract for photo persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import uuid

from photohub.domain.models.photo import Photo, UpdatePhoto


class PhotoRepository(ABC):
    """Repository interface for Photo entities."""

    @abstractmethod
    async def find_all_photos(self, limit: int, offset: int) -> List[Photo]:
        """Return photos ordered by creation time, newest first."""
        pass

    @abstractmethod
    async def find_photo_by_id(self, photo_id: uuid.UUID) -> Optional[Photo]:
        """
        Find a photo by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def create_photo(self, photo: Photo) -> Photo:
        pass

    @abstractmethod
    async def update_photo(self, update_photo: UpdatePhoto) -> Photo:
        """
        Apply a partial update.
        Raises EntityNotFoundError if the photo does not exist.
        """
        pass
