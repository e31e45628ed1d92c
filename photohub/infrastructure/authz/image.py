"""
Policy enforcement for stored images.
"""

from photohub.domain.models.image import ImageReference
from photohub.infrastructure.auth.user import AuthenticatedUser

from .claims import AuthorizationScope, CommonClaims
from .policy_client import Decision, PolicyDecisionClient

IMAGE_BY_ID_RESOURCE = "/images/{id}"


class ImagePolicyEnforcer:
    """Maps image downloads and transformations to permission requests."""

    def __init__(self, policy_client: PolicyDecisionClient):
        self.policy_client = policy_client

    async def _evaluate(self, user: AuthenticatedUser, image: ImageReference, *scopes: AuthorizationScope) -> Decision:
        claims = CommonClaims.for_view(image.owner_user_id, image.visibility)
        return await self.policy_client.evaluate(user, IMAGE_BY_ID_RESOURCE, claims, list(scopes))

    async def can_view(self, user: AuthenticatedUser, image: ImageReference) -> Decision:
        return await self._evaluate(user, image, AuthorizationScope.VIEW)

    async def can_download(self, user: AuthenticatedUser, image: ImageReference) -> Decision:
        return await self._evaluate(user, image, AuthorizationScope.DOWNLOAD)

    async def can_transform(self, user: AuthenticatedUser, image: ImageReference) -> Decision:
        return await self._evaluate(user, image, AuthorizationScope.TRANSFORM)

    async def can_download_then_transform(self, user: AuthenticatedUser, image: ImageReference) -> Decision:
        return await self._evaluate(user, image, AuthorizationScope.DOWNLOAD, AuthorizationScope.TRANSFORM)

    async def can_create(self, user: AuthenticatedUser) -> Decision:
        return await self.policy_client.evaluate(
            user, IMAGE_BY_ID_RESOURCE, CommonClaims.empty(), [AuthorizationScope.CREATE]
        )
