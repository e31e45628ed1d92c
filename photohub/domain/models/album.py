"""
Album domain models.
"""

from dataclasses import dataclass, field
from typing import Optional
import uuid

from .base import BaseEntity, Visibility, ValidationError
from .image import UploadImage


@dataclass(eq=False)
class Album(BaseEntity):
    """A titled collection of photos with a cover image."""

    title: str = ""
    description: str = ""
    visibility: Visibility = Visibility.PRIVATE
    owner_user_id: uuid.UUID = field(default_factory=uuid.uuid4)
    cover_image_id: Optional[uuid.UUID] = None
    cover_image_url: str = ""

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("Album title cannot be empty", field="title")

    def apply(self, update: "UpdateAlbum") -> None:
        if update.title is not None:
            self.title = update.title
        if update.visibility is not None:
            self.visibility = update.visibility
        self.validate()


@dataclass
class UpdateAlbum:
    """Partial update of an album. Fields left as None are unchanged."""

    id: uuid.UUID
    title: Optional[str] = None
    visibility: Optional[Visibility] = None

    @property
    def is_empty(self) -> bool:
        return self.title is None and self.visibility is None


@dataclass
class CreateAlbumWithCover:
    """A new album together with its cover image bytes."""

    title: str
    description: str
    visibility: Visibility
    upload_image: UploadImage
