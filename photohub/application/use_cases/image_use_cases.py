"""
Image use cases for the application layer.
"""

import uuid

from photohub.domain.models.base import EntityNotFoundError, UnauthorizedToView, UnsupportedOperationError
from photohub.domain.models.image import Image, ImageReference, ImageTransformOptions
from photohub.domain.repositories import ImageReferenceRepository
from photohub.infrastructure.auth.user import AuthenticatedUser
from photohub.infrastructure.authz.image import ImagePolicyEnforcer
from photohub.infrastructure.storage.image_storage import ImageStorage

from .base_use_case import AuthorizedUseCase


class GetImageUseCase(AuthorizedUseCase):
    """
    Download an image. Requesting transformations additionally requires the
    Transform scope; authorized transform requests are refused because no
    transform pipeline is available.
    """

    def __init__(
        self,
        image_reference_repository: ImageReferenceRepository,
        image_storage: ImageStorage,
        image_policy_enforcer: ImagePolicyEnforcer,
    ):
        self.image_reference_repository = image_reference_repository
        self.image_storage = image_storage
        self.image_policy_enforcer = image_policy_enforcer

    async def execute(
        self,
        user: AuthenticatedUser,
        image_id: uuid.UUID,
        options: ImageTransformOptions = ImageTransformOptions(),
    ) -> Image:
        image_reference = await self.image_reference_repository.find_image_reference_by_id(image_id)
        if image_reference is None:
            raise EntityNotFoundError("Image", image_id)

        if options.contains_transformations:
            decision = await self.image_policy_enforcer.can_download_then_transform(user, image_reference)
        else:
            decision = await self.image_policy_enforcer.can_download(user, image_reference)
        self.ensure_allowed(decision, lambda: UnauthorizedToView("Image", image_id))

        if options.contains_transformations:
            raise UnsupportedOperationError(
                f"Image transformations are not supported: {', '.join(options.transformations())}"
            )

        image = await self.image_storage.download_image(image_id)
        if image is None:
            raise EntityNotFoundError("Image", image_id)
        return image


class GetImageReferenceUseCase(AuthorizedUseCase):
    """Return an image's metadata without its bytes."""

    def __init__(
        self,
        image_reference_repository: ImageReferenceRepository,
        image_policy_enforcer: ImagePolicyEnforcer,
    ):
        self.image_reference_repository = image_reference_repository
        self.image_policy_enforcer = image_policy_enforcer

    async def execute(self, user: AuthenticatedUser, image_id: uuid.UUID) -> ImageReference:
        image_reference = await self.image_reference_repository.find_image_reference_by_id(image_id)
        if image_reference is None:
            raise EntityNotFoundError("Image", image_id)

        decision = await self.image_policy_enforcer.can_view(user, image_reference)
        self.ensure_allowed(decision, lambda: UnauthorizedToView("Image", image_id))
        return image_reference
