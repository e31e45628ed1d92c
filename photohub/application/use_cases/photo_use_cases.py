"""
Photo use cases for the application layer.
"""

import logging
import uuid

from photohub.domain.models.base import (
    EntityNotFoundError,
    UnauthorizedToCreate,
    UnauthorizedToEdit,
    UnauthorizedToView,
    ValidationError,
)
from photohub.domain.models.image import ImageReference
from photohub.domain.models.pagination import Page
from photohub.domain.models.photo import Photo, UpdatePhoto, UploadPhoto
from photohub.domain.repositories import (
    AlbumRepository,
    ImageReferenceRepository,
    PhotoRepository,
)
from photohub.infrastructure.auth.user import AuthenticatedUser
from photohub.infrastructure.authz.image import ImagePolicyEnforcer
from photohub.infrastructure.authz.photo import PhotoPolicyEnforcer
from photohub.infrastructure.storage.image_storage import ImageReferenceUrlBuilder, ImageStorage

from .base_use_case import AuthorizedUseCase

logger = logging.getLogger(__name__)


class ListPhotosUseCase(AuthorizedUseCase):
    """List the photos the user is allowed to view."""

    def __init__(self, photo_repository: PhotoRepository, photo_policy_enforcer: PhotoPolicyEnforcer):
        self.photo_repository = photo_repository
        self.photo_policy_enforcer = photo_policy_enforcer

    async def execute(self, user: AuthenticatedUser, page: int = 0, per_page: int = AuthorizedUseCase.DEFAULT_PAGE_SIZE) -> Page[Photo]:
        photos = await self.photo_repository.find_all_photos(per_page, page * per_page)
        visible = await self.photo_policy_enforcer.filter_photos_by_view_permission(user, photos)
        return Page(data=visible, current_page=page, per_page=len(visible))


class GetPhotoByIdUseCase(AuthorizedUseCase):

    def __init__(self, photo_repository: PhotoRepository, photo_policy_enforcer: PhotoPolicyEnforcer):
        self.photo_repository = photo_repository
        self.photo_policy_enforcer = photo_policy_enforcer

    async def execute(self, user: AuthenticatedUser, photo_id: uuid.UUID) -> Photo:
        photo = await self.photo_repository.find_photo_by_id(photo_id)
        if photo is None:
            raise EntityNotFoundError("Photo", photo_id)

        decision = await self.photo_policy_enforcer.can_view_photo(user, photo)
        self.ensure_allowed(decision, lambda: UnauthorizedToView("Photo", photo_id))
        return photo


class CreatePhotoUseCase(AuthorizedUseCase):
    """Upload a photo's image and store the photo, owned by the caller."""

    def __init__(
        self,
        photo_repository: PhotoRepository,
        album_repository: AlbumRepository,
        image_reference_repository: ImageReferenceRepository,
        image_storage: ImageStorage,
        photo_policy_enforcer: PhotoPolicyEnforcer,
        image_policy_enforcer: ImagePolicyEnforcer,
        url_builder: ImageReferenceUrlBuilder,
    ):
        self.photo_repository = photo_repository
        self.album_repository = album_repository
        self.image_reference_repository = image_reference_repository
        self.image_storage = image_storage
        self.photo_policy_enforcer = photo_policy_enforcer
        self.image_policy_enforcer = image_policy_enforcer
        self.url_builder = url_builder

    async def execute(self, user: AuthenticatedUser, upload_photo: UploadPhoto) -> Photo:
        if not upload_photo.title or not upload_photo.title.strip():
            raise ValidationError("Photo title cannot be empty", field="title")

        decision = await self.photo_policy_enforcer.can_create_photo(user)
        self.ensure_allowed(decision, lambda: UnauthorizedToCreate("Photo"))
        decision = await self.image_policy_enforcer.can_create(user)
        self.ensure_allowed(decision, lambda: UnauthorizedToCreate("Image"))

        if upload_photo.album_id is not None:
            album = await self.album_repository.find_album_by_id(upload_photo.album_id)
            if album is None or album.owner_user_id != user.id:
                raise ValidationError("Invalid album", field="album_id")

        image_id = uuid.uuid4()
        await self.image_storage.upload_image(image_id, upload_photo.upload_image)
        image_reference = await self.image_reference_repository.create_image_reference(
            ImageReference(
                id=image_id,
                owner_user_id=user.id,
                url=self.url_builder.build(image_id),
                size=upload_photo.upload_image.size,
                format=upload_photo.upload_image.format,
                visibility=upload_photo.visibility,
            )
        )

        photo = Photo(
            title=upload_photo.title,
            description=upload_photo.description,
            category=upload_photo.category,
            tags=list(upload_photo.tags),
            owner_user_id=user.id,
            album_id=upload_photo.album_id,
            visibility=upload_photo.visibility,
            image=image_reference,
        )
        created = await self.photo_repository.create_photo(photo)
        logger.info(f"User {user.id} created photo {created.id}")
        return created


class UpdatePhotoUseCase(AuthorizedUseCase):
    """Apply a partial update. Authorization scopes follow the changed fields."""

    def __init__(self, photo_repository: PhotoRepository, photo_policy_enforcer: PhotoPolicyEnforcer):
        self.photo_repository = photo_repository
        self.photo_policy_enforcer = photo_policy_enforcer

    async def execute(self, user: AuthenticatedUser, update_photo: UpdatePhoto) -> Photo:
        if update_photo.is_empty:
            raise ValidationError("Update does not change any field")

        photo = await self.photo_repository.find_photo_by_id(update_photo.id)
        if photo is None:
            raise EntityNotFoundError("Photo", update_photo.id)

        decision = await self.photo_policy_enforcer.can_edit_photo(user, photo, update_photo)
        self.ensure_allowed(decision, lambda: UnauthorizedToEdit("Photo", update_photo.id))
        return await self.photo_repository.update_photo(update_photo)
