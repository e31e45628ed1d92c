"""
Album DTOs for the application layer.
"""

from datetime import datetime
from typing import Optional
import uuid

from pydantic import Field

from photohub.domain.models.album import Album, CreateAlbumWithCover, UpdateAlbum
from photohub.domain.models.base import Visibility
from photohub.domain.models.image import UploadImage

from .base_dto import RequestDTO, ResponseDTO
from .photo_dto import VisibilityField


class AlbumResponseDTO(ResponseDTO):
    id: uuid.UUID
    title: str
    description: str
    visibility: Visibility
    created_at: datetime = Field(alias="createdAt")
    cover_image_id: Optional[uuid.UUID] = Field(default=None, alias="coverImageId")
    cover_image_url: str = Field(default="", alias="coverImageUrl")

    @classmethod
    def from_domain(cls, album: Album) -> "AlbumResponseDTO":
        return cls(
            id=album.id,
            title=album.title,
            description=album.description,
            visibility=album.visibility,
            created_at=album.created_at,
            cover_image_id=album.cover_image_id,
            cover_image_url=album.cover_image_url,
        )


class CreateAlbumMetadataDTO(RequestDTO):
    """JSON metadata part of an album creation upload."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    visibility: VisibilityField = Visibility.PRIVATE

    def to_domain(self, upload_image: UploadImage) -> CreateAlbumWithCover:
        return CreateAlbumWithCover(
            title=self.title,
            description=self.description,
            visibility=Visibility(self.visibility),
            upload_image=upload_image,
        )


class PatchAlbumRequestDTO(RequestDTO):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    visibility: Optional[VisibilityField] = None

    def to_domain(self, album_id: uuid.UUID) -> UpdateAlbum:
        return UpdateAlbum(
            id=album_id,
            title=self.title,
            visibility=Visibility(self.visibility) if self.visibility is not None else None,
        )
