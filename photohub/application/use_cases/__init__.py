"""
Use cases for the application layer.
"""

from .base_use_case import AuthorizedUseCase
from .photo_use_cases import (
    CreatePhotoUseCase,
    GetPhotoByIdUseCase,
    ListPhotosUseCase,
    UpdatePhotoUseCase,
)
from .album_use_cases import (
    CreateAlbumUseCase,
    GetAlbumByIdUseCase,
    ListAlbumsUseCase,
    UpdateAlbumUseCase,
)
from .image_use_cases import GetImageReferenceUseCase, GetImageUseCase

__all__ = [
    "AuthorizedUseCase",
    "CreatePhotoUseCase",
    "GetPhotoByIdUseCase",
    "ListPhotosUseCase",
    "UpdatePhotoUseCase",
    "CreateAlbumUseCase",
    "GetAlbumByIdUseCase",
    "ListAlbumsUseCase",
    "UpdateAlbumUseCase",
    "GetImageReferenceUseCase",
    "GetImageUseCase",
]
