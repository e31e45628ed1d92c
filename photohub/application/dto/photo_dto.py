"""
Photo DTOs for the application layer.
"""

from datetime import datetime
from typing import Annotated, List, Optional
import uuid

from pydantic import BeforeValidator, Field

from photohub.domain.models.base import Visibility
from photohub.domain.models.image import UploadImage
from photohub.domain.models.photo import Photo, UpdatePhoto, UploadPhoto

from .base_dto import RequestDTO, ResponseDTO


def parse_visibility(value):
    """Accept Public/public/PUBLIC and the same for Private."""
    if isinstance(value, str):
        return value.capitalize()
    return value


VisibilityField = Annotated[Visibility, BeforeValidator(parse_visibility)]


class PhotoResponseDTO(ResponseDTO):
    """Photo as exposed by the API."""

    id: uuid.UUID
    album_id: Optional[uuid.UUID] = Field(default=None, alias="albumId")
    title: str
    description: str
    category: str
    tags: str
    visibility: Visibility
    created_at: datetime = Field(alias="createdAt")
    image_id: Optional[uuid.UUID] = Field(default=None, alias="imageId")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @classmethod
    def from_domain(cls, photo: Photo) -> "PhotoResponseDTO":
        return cls(
            id=photo.id,
            album_id=photo.album_id,
            title=photo.title,
            description=photo.description,
            category=photo.category,
            tags=", ".join(photo.tags),
            visibility=photo.visibility,
            created_at=photo.created_at,
            image_id=photo.image.id if photo.image else None,
            image_url=photo.image.url if photo.image else None,
        )


class UploadPhotoMetadataDTO(RequestDTO):
    """JSON metadata part of a photo upload."""

    title: str = Field(..., min_length=1, max_length=255)
    album_id: Optional[uuid.UUID] = Field(default=None, alias="albumId")
    description: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    visibility: VisibilityField = Visibility.PRIVATE

    def to_domain(self, upload_image: UploadImage) -> UploadPhoto:
        return UploadPhoto(
            title=self.title,
            description=self.description,
            category=self.category,
            tags=self.tags,
            visibility=Visibility(self.visibility),
            upload_image=upload_image,
            album_id=self.album_id,
        )


class PatchPhotoRequestDTO(RequestDTO):
    """Partial update of a photo."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    album_id: Optional[uuid.UUID] = Field(default=None, alias="albumId")
    visibility: Optional[VisibilityField] = None

    def to_domain(self, photo_id: uuid.UUID) -> UpdatePhoto:
        return UpdatePhoto(
            id=photo_id,
            title=self.title,
            album_id=self.album_id,
            visibility=Visibility(self.visibility) if self.visibility is not None else None,
        )
