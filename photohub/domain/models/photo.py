"""
Photo domain models.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import uuid

from .base import BaseEntity, Visibility, ValidationError
from .image import ImageReference, UploadImage


@dataclass(eq=False)
class Photo(BaseEntity):
    """A photo published by a user, optionally part of an album."""

    title: str = ""
    description: str = ""
    category: str = ""
    tags: List[str] = field(default_factory=list)
    owner_user_id: uuid.UUID = field(default_factory=uuid.uuid4)
    album_id: Optional[uuid.UUID] = None
    visibility: Visibility = Visibility.PRIVATE
    image: Optional[ImageReference] = None

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("Photo title cannot be empty", field="title")

    def apply(self, update: "UpdatePhoto") -> None:
        """Copy the fields present in an update onto this photo."""
        if update.title is not None:
            self.title = update.title
        if update.album_id is not None:
            self.album_id = update.album_id
        if update.visibility is not None:
            self.visibility = update.visibility
        self.validate()


@dataclass
class UpdatePhoto:
    """Partial update of a photo. Fields left as None are unchanged."""

    id: uuid.UUID
    title: Optional[str] = None
    album_id: Optional[uuid.UUID] = None
    visibility: Optional[Visibility] = None

    @property
    def is_empty(self) -> bool:
        return self.title is None and self.album_id is None and self.visibility is None


@dataclass
class UploadPhoto:
    """A new photo together with its image bytes."""

    title: str
    description: str
    category: str
    tags: List[str]
    visibility: Visibility
    upload_image: UploadImage
    album_id: Optional[uuid.UUID] = None
