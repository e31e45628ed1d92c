"""
Album use cases for the application layer.
"""

import logging
import uuid

from photohub.domain.models.album import Album, CreateAlbumWithCover, UpdateAlbum
from photohub.domain.models.base import (
    EntityNotFoundError,
    UnauthorizedToCreate,
    UnauthorizedToEdit,
    UnauthorizedToView,
    ValidationError,
)
from photohub.domain.models.image import ImageReference
from photohub.domain.models.pagination import Page
from photohub.domain.repositories import AlbumRepository, ImageReferenceRepository
from photohub.infrastructure.auth.user import AuthenticatedUser
from photohub.infrastructure.authz.album import AlbumPolicyEnforcer
from photohub.infrastructure.authz.image import ImagePolicyEnforcer
from photohub.infrastructure.storage.image_storage import ImageReferenceUrlBuilder, ImageStorage

from .base_use_case import AuthorizedUseCase

logger = logging.getLogger(__name__)


class ListAlbumsUseCase(AuthorizedUseCase):

    def __init__(self, album_repository: AlbumRepository, album_policy_enforcer: AlbumPolicyEnforcer):
        self.album_repository = album_repository
        self.album_policy_enforcer = album_policy_enforcer

    async def execute(self, user: AuthenticatedUser, page: int = 0, per_page: int = AuthorizedUseCase.DEFAULT_PAGE_SIZE) -> Page[Album]:
        albums = await self.album_repository.find_all_albums(per_page, page * per_page)
        visible = await self.album_policy_enforcer.filter_albums_by_view_permission(user, albums)
        return Page(data=visible, current_page=page, per_page=len(visible))


class GetAlbumByIdUseCase(AuthorizedUseCase):

    def __init__(self, album_repository: AlbumRepository, album_policy_enforcer: AlbumPolicyEnforcer):
        self.album_repository = album_repository
        self.album_policy_enforcer = album_policy_enforcer

    async def execute(self, user: AuthenticatedUser, album_id: uuid.UUID) -> Album:
        album = await self.album_repository.find_album_by_id(album_id)
        if album is None:
            raise EntityNotFoundError("Album", album_id)

        decision = await self.album_policy_enforcer.can_view_album(user, album)
        self.ensure_allowed(decision, lambda: UnauthorizedToView("Album", album_id))
        return album


class CreateAlbumUseCase(AuthorizedUseCase):
    """Upload the cover image and store a new album owned by the caller."""

    def __init__(
        self,
        album_repository: AlbumRepository,
        image_reference_repository: ImageReferenceRepository,
        image_storage: ImageStorage,
        album_policy_enforcer: AlbumPolicyEnforcer,
        image_policy_enforcer: ImagePolicyEnforcer,
        url_builder: ImageReferenceUrlBuilder,
    ):
        self.album_repository = album_repository
        self.image_reference_repository = image_reference_repository
        self.image_storage = image_storage
        self.album_policy_enforcer = album_policy_enforcer
        self.image_policy_enforcer = image_policy_enforcer
        self.url_builder = url_builder

    async def execute(self, user: AuthenticatedUser, create_album: CreateAlbumWithCover) -> Album:
        if not create_album.title or not create_album.title.strip():
            raise ValidationError("Album title cannot be empty", field="title")

        decision = await self.album_policy_enforcer.can_create_album(user)
        self.ensure_allowed(decision, lambda: UnauthorizedToCreate("Album"))
        decision = await self.image_policy_enforcer.can_create(user)
        self.ensure_allowed(decision, lambda: UnauthorizedToCreate("Image"))

        cover_image_id = uuid.uuid4()
        await self.image_storage.upload_image(cover_image_id, create_album.upload_image)
        cover_url = self.url_builder.build(cover_image_id)
        await self.image_reference_repository.create_image_reference(
            ImageReference(
                id=cover_image_id,
                owner_user_id=user.id,
                url=cover_url,
                size=create_album.upload_image.size,
                format=create_album.upload_image.format,
                visibility=create_album.visibility,
            )
        )

        album = Album(
            title=create_album.title,
            description=create_album.description,
            visibility=create_album.visibility,
            owner_user_id=user.id,
            cover_image_id=cover_image_id,
            cover_image_url=cover_url,
        )
        created = await self.album_repository.create_album(album)
        logger.info(f"User {user.id} created album {created.id}")
        return created


class UpdateAlbumUseCase(AuthorizedUseCase):

    def __init__(self, album_repository: AlbumRepository, album_policy_enforcer: AlbumPolicyEnforcer):
        self.album_repository = album_repository
        self.album_policy_enforcer = album_policy_enforcer

    async def execute(self, user: AuthenticatedUser, update_album: UpdateAlbum) -> Album:
        if update_album.is_empty:
            raise ValidationError("Update does not change any field")

        album = await self.album_repository.find_album_by_id(update_album.id)
        if album is None:
            raise EntityNotFoundError("Album", update_album.id)

        decision = await self.album_policy_enforcer.can_edit_album(user, album, update_album)
        self.ensure_allowed(decision, lambda: UnauthorizedToEdit("Album", update_album.id))
        return await self.album_repository.update_album(update_album)
