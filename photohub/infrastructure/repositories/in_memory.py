"""
In-memory repository implementations.
Used for development and tests in place of a database.
"""

import copy
import logging
from typing import Dict, List, Optional
import uuid

from photohub.domain.models.album import Album, UpdateAlbum
from photohub.domain.models.base import EntityNotFoundError
from photohub.domain.models.image import ImageReference
from photohub.domain.models.photo import Photo, UpdatePhoto
from photohub.domain.repositories import AlbumRepository, ImageReferenceRepository, PhotoRepository

logger = logging.getLogger(__name__)


class InMemoryPhotoRepository(PhotoRepository):
    """Dictionary backed photo repository."""

    def __init__(self, photos: Optional[List[Photo]] = None):
        self._photos: Dict[uuid.UUID, Photo] = {photo.id: photo for photo in photos or []}

    async def find_all_photos(self, limit: int, offset: int) -> List[Photo]:
        photos = sorted(self._photos.values(), key=lambda p: p.created_at, reverse=True)
        return [copy.deepcopy(photo) for photo in photos[offset:offset + limit]]

    async def find_photo_by_id(self, photo_id: uuid.UUID) -> Optional[Photo]:
        photo = self._photos.get(photo_id)
        return copy.deepcopy(photo) if photo is not None else None

    async def create_photo(self, photo: Photo) -> Photo:
        photo.validate()
        self._photos[photo.id] = copy.deepcopy(photo)
        logger.debug(f"Stored photo {photo.id}")
        return photo

    async def update_photo(self, update_photo: UpdatePhoto) -> Photo:
        photo = self._photos.get(update_photo.id)
        if photo is None:
            raise EntityNotFoundError("Photo", update_photo.id)
        updated = copy.deepcopy(photo)
        updated.apply(update_photo)
        self._photos[updated.id] = updated
        return copy.deepcopy(updated)


class InMemoryAlbumRepository(AlbumRepository):
    """Dictionary backed album repository."""

    def __init__(self, albums: Optional[List[Album]] = None):
        self._albums: Dict[uuid.UUID, Album] = {album.id: album for album in albums or []}

    async def find_all_albums(self, limit: int, offset: int) -> List[Album]:
        albums = sorted(self._albums.values(), key=lambda a: a.created_at, reverse=True)
        return [copy.deepcopy(album) for album in albums[offset:offset + limit]]

    async def find_album_by_id(self, album_id: uuid.UUID) -> Optional[Album]:
        album = self._albums.get(album_id)
        return copy.deepcopy(album) if album is not None else None

    async def create_album(self, album: Album) -> Album:
        album.validate()
        self._albums[album.id] = copy.deepcopy(album)
        logger.debug(f"Stored album {album.id}")
        return album

    async def update_album(self, update_album: UpdateAlbum) -> Album:
        album = self._albums.get(update_album.id)
        if album is None:
            raise EntityNotFoundError("Album", update_album.id)
        updated = copy.deepcopy(album)
        updated.apply(update_album)
        self._albums[updated.id] = updated
        return copy.deepcopy(updated)


class InMemoryImageReferenceRepository(ImageReferenceRepository):

    def __init__(self, image_references: Optional[List[ImageReference]] = None):
        self._references: Dict[uuid.UUID, ImageReference] = {
            reference.id: reference for reference in image_references or []
        }

    async def find_image_reference_by_id(self, image_id: uuid.UUID) -> Optional[ImageReference]:
        reference = self._references.get(image_id)
        return copy.deepcopy(reference) if reference is not None else None

    async def create_image_reference(self, image_reference: ImageReference) -> ImageReference:
        self._references[image_reference.id] = copy.deepcopy(image_reference)
        return image_reference
