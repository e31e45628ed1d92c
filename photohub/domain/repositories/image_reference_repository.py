from abc import ABC, abstractmethod
from typing import Optional
import uuid

from photohub.domain.models.image import ImageReference


class ImageReferenceRepository(ABC):
    """Repository interface for image references."""

    @abstractmethod
    async def find_image_reference_by_id(self, image_id: uuid.UUID) -> Optional[ImageReference]:
        pass

    @abstractmethod
    async def create_image_reference(self, image_reference: ImageReference) -> ImageReference:
        pass
