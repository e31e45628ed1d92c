"""
Policy enforcement for photos.
"""

from typing import List

from photohub.domain.models.photo import Photo, UpdatePhoto
from photohub.infrastructure.auth.user import AuthenticatedUser

from .claims import AuthorizationScope, CommonClaims
from .policy_client import Decision, PolicyDecisionClient

PHOTO_BY_ID_RESOURCE = "/photos/{id}"


def _view_claims(photo: Photo) -> CommonClaims:
    return CommonClaims.for_view(photo.owner_user_id, photo.visibility)


class PhotoPolicyEnforcer:
    """Maps photo operations to permission requests on the photo resource."""

    def __init__(self, policy_client: PolicyDecisionClient):
        self.policy_client = policy_client

    async def can_view_photo(self, user: AuthenticatedUser, photo: Photo) -> Decision:
        return await self.policy_client.evaluate(
            user, PHOTO_BY_ID_RESOURCE, _view_claims(photo), [AuthorizationScope.VIEW]
        )

    async def can_create_photo(self, user: AuthenticatedUser) -> Decision:
        return await self.policy_client.evaluate(
            user, PHOTO_BY_ID_RESOURCE, CommonClaims.empty(), [AuthorizationScope.CREATE]
        )

    async def can_edit_photo(
        self,
        user: AuthenticatedUser,
        photo: Photo,
        update_photo: UpdatePhoto,
    ) -> Decision:
        """Only the owner may edit, whatever the photo's visibility."""
        return await self.policy_client.evaluate(
            user,
            PHOTO_BY_ID_RESOURCE,
            CommonClaims.for_owner(photo.owner_user_id),
            self.authorization_scopes(update_photo),
        )

    async def filter_photos_by_view_permission(
        self,
        user: AuthenticatedUser,
        photos: List[Photo],
    ) -> List[Photo]:
        return await self.policy_client.filter_allowed(
            user, photos, PHOTO_BY_ID_RESOURCE, _view_claims, [AuthorizationScope.VIEW]
        )

    @staticmethod
    def authorization_scopes(update_photo: UpdatePhoto) -> List[AuthorizationScope]:
        """Scopes for exactly the fields the update changes."""
        scopes = []
        if update_photo.visibility is not None:
            scopes.append(AuthorizationScope.CHANGE_VISIBILITY)
        if update_photo.album_id is not None:
            scopes.append(AuthorizationScope.CHANGE_ALBUM)
        if update_photo.title is not None:
            scopes.append(AuthorizationScope.EDIT_TITLE)
        return scopes
