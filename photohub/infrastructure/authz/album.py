"""
Policy enforcement for albums.
"""

from typing import List

from photohub.domain.models.album import Album, UpdateAlbum
from photohub.infrastructure.auth.user import AuthenticatedUser

from .claims import AuthorizationScope, CommonClaims
from .policy_client import Decision, PolicyDecisionClient

ALBUM_BY_ID_RESOURCE = "/albums/{id}"


def _view_claims(album: Album) -> CommonClaims:
    return CommonClaims.for_view(album.owner_user_id, album.visibility)


class AlbumPolicyEnforcer:
    """Maps album operations to permission requests on the album resource."""

    def __init__(self, policy_client: PolicyDecisionClient):
        self.policy_client = policy_client

    async def can_view_album(self, user: AuthenticatedUser, album: Album) -> Decision:
        return await self.policy_client.evaluate(
            user, ALBUM_BY_ID_RESOURCE, _view_claims(album), [AuthorizationScope.VIEW]
        )

    async def can_create_album(self, user: AuthenticatedUser) -> Decision:
        return await self.policy_client.evaluate(
            user, ALBUM_BY_ID_RESOURCE, CommonClaims.empty(), [AuthorizationScope.CREATE]
        )

    async def can_edit_album(
        self,
        user: AuthenticatedUser,
        album: Album,
        update_album: UpdateAlbum,
    ) -> Decision:
        return await self.policy_client.evaluate(
            user,
            ALBUM_BY_ID_RESOURCE,
            CommonClaims.for_owner(album.owner_user_id),
            self.authorization_scopes(update_album),
        )

    async def filter_albums_by_view_permission(
        self,
        user: AuthenticatedUser,
        albums: List[Album],
    ) -> List[Album]:
        return await self.policy_client.filter_allowed(
            user, albums, ALBUM_BY_ID_RESOURCE, _view_claims, [AuthorizationScope.VIEW]
        )

    @staticmethod
    def authorization_scopes(update_album: UpdateAlbum) -> List[AuthorizationScope]:
        scopes = []
        if update_album.visibility is not None:
            scopes.append(AuthorizationScope.CHANGE_VISIBILITY)
        if update_album.title is not None:
            scopes.append(AuthorizationScope.EDIT_TITLE)
        return scopes
