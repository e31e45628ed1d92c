"""
Album repository interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import uuid

from photohub.domain.models.album import Album, UpdateAlbum


class AlbumRepository(ABC):
    """Repository interface for Album entities."""

    @abstractmethod
    async def find_all_albums(self, limit: int, offset: int) -> List[Album]:
        pass

    @abstractmethod
    async def find_album_by_id(self, album_id: uuid.UUID) -> Optional[Album]:
        """
        Find an album by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def create_album(self, album: Album) -> Album:
        pass

    @abstractmethod
    async def update_album(self, update_album: UpdateAlbum) -> Album:
        """
        Apply a partial update.
        Raises EntityNotFoundError if the album does not exist.
        """
        pass
