"""
Image domain models: stored image references, raw images and uploads.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from enum import Enum
import uuid

from .base import BaseEntity, Visibility, ValidationError


class ImageFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @classmethod
    def from_content_type(cls, content_type: Optional[str]) -> "ImageFormat":
        """Map an upload's MIME type to a supported image format."""
        if not content_type:
            raise ValidationError("Missing content type", field="file")
        main_type, _, subtype = content_type.partition("/")
        if main_type != "image":
            raise ValidationError(f"Bad content type: {content_type}", field="file")
        try:
            return cls(subtype.lower())
        except ValueError:
            raise ValidationError(f"Unsupported image type: {content_type}", field="file")


@dataclass(eq=False)
class ImageReference(BaseEntity):
    """Metadata about an image kept in object storage."""

    owner_user_id: uuid.UUID = field(default_factory=uuid.uuid4)
    url: str = ""
    size: int = 0
    format: ImageFormat = ImageFormat.PNG
    visibility: Visibility = Visibility.PRIVATE


@dataclass
class UploadImage:
    """Image bytes received from a client."""

    filename: str
    content: bytes
    format: ImageFormat

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class Image:
    """Image bytes fetched from storage."""

    id: uuid.UUID
    filename: str
    format: ImageFormat
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ImageTransformOptions:
    """Transformations requested alongside a download."""

    huerotate: Optional[int] = None
    thumbnail: Optional[Tuple[int, int]] = None

    def transformations(self) -> List[str]:
        requested = []
        if self.huerotate is not None:
            requested.append("huerotate")
        if self.thumbnail is not None:
            requested.append("thumbnail")
        return requested

    @property
    def contains_transformations(self) -> bool:
        return bool(self.transformations())
