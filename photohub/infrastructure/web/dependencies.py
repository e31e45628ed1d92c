"""
FastAPI dependencies wiring repositories, storage and policy enforcers
into use cases.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, File, Request, UploadFile

from photohub.application.use_cases import (
    CreateAlbumUseCase,
    CreatePhotoUseCase,
    GetAlbumByIdUseCase,
    GetImageReferenceUseCase,
    GetImageUseCase,
    GetPhotoByIdUseCase,
    ListAlbumsUseCase,
    ListPhotosUseCase,
    UpdateAlbumUseCase,
    UpdatePhotoUseCase,
)
from photohub.domain.models.image import ImageFormat, UploadImage
from photohub.domain.repositories import (
    AlbumRepository,
    ImageReferenceRepository,
    PhotoRepository,
)
from photohub.infrastructure.authz import (
    AlbumPolicyEnforcer,
    ImagePolicyEnforcer,
    PhotoPolicyEnforcer,
)
from photohub.infrastructure.storage import ImageReferenceUrlBuilder, ImageStorage


@dataclass
class ServiceContainer:
    """Application services created at startup and shared by all requests."""

    photo_repository: PhotoRepository
    album_repository: AlbumRepository
    image_reference_repository: ImageReferenceRepository
    image_storage: ImageStorage
    photo_policy_enforcer: PhotoPolicyEnforcer
    album_policy_enforcer: AlbumPolicyEnforcer
    image_policy_enforcer: ImagePolicyEnforcer
    url_builder: ImageReferenceUrlBuilder


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


Container = Annotated[ServiceContainer, Depends(get_container)]


def get_list_photos_use_case(container: Container) -> ListPhotosUseCase:
    return ListPhotosUseCase(container.photo_repository, container.photo_policy_enforcer)


def get_photo_by_id_use_case(container: Container) -> GetPhotoByIdUseCase:
    return GetPhotoByIdUseCase(container.photo_repository, container.photo_policy_enforcer)


def get_create_photo_use_case(container: Container) -> CreatePhotoUseCase:
    return CreatePhotoUseCase(
        container.photo_repository,
        container.album_repository,
        container.image_reference_repository,
        container.image_storage,
        container.photo_policy_enforcer,
        container.image_policy_enforcer,
        container.url_builder,
    )


def get_update_photo_use_case(container: Container) -> UpdatePhotoUseCase:
    return UpdatePhotoUseCase(container.photo_repository, container.photo_policy_enforcer)


def get_list_albums_use_case(container: Container) -> ListAlbumsUseCase:
    return ListAlbumsUseCase(container.album_repository, container.album_policy_enforcer)


def get_album_by_id_use_case(container: Container) -> GetAlbumByIdUseCase:
    return GetAlbumByIdUseCase(container.album_repository, container.album_policy_enforcer)


def get_create_album_use_case(container: Container) -> CreateAlbumUseCase:
    return CreateAlbumUseCase(
        container.album_repository,
        container.image_reference_repository,
        container.image_storage,
        container.album_policy_enforcer,
        container.image_policy_enforcer,
        container.url_builder,
    )


def get_update_album_use_case(container: Container) -> UpdateAlbumUseCase:
    return UpdateAlbumUseCase(container.album_repository, container.album_policy_enforcer)


def get_image_use_case(container: Container) -> GetImageUseCase:
    return GetImageUseCase(
        container.image_reference_repository,
        container.image_storage,
        container.image_policy_enforcer,
    )


def get_image_reference_use_case(container: Container) -> GetImageReferenceUseCase:
    return GetImageReferenceUseCase(container.image_reference_repository, container.image_policy_enforcer)


async def read_upload_image(file: UploadFile = File(...)) -> UploadImage:
    """Read an uploaded image part, rejecting non-image content."""
    image_format = ImageFormat.from_content_type(file.content_type)
    content = await file.read()
    return UploadImage(filename=file.filename or "", content=content, format=image_format)
