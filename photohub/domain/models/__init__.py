"""
Domain models for the photo hub.
This module exports all domain entities, value objects and domain errors.
"""

# Base classes
from .base import (
    BaseEntity,
    Visibility,
    DomainException,
    ValidationError,
    EntityNotFoundError,
    AuthorizationDenied,
    UnauthorizedToView,
    UnauthorizedToCreate,
    UnauthorizedToEdit,
    UnsupportedOperationError,
)

# Domain entities
from .image import Image, ImageFormat, ImageReference, ImageTransformOptions, UploadImage
from .photo import Photo, UpdatePhoto, UploadPhoto
from .album import Album, UpdateAlbum, CreateAlbumWithCover
from .pagination import Page

__all__ = [
    "BaseEntity",
    "Visibility",
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "AuthorizationDenied",
    "UnauthorizedToView",
    "UnauthorizedToCreate",
    "UnauthorizedToEdit",
    "UnsupportedOperationError",
    "Image",
    "ImageFormat",
    "ImageReference",
    "ImageTransformOptions",
    "UploadImage",
    "Photo",
    "UpdatePhoto",
    "UploadPhoto",
    "Album",
    "UpdateAlbum",
    "CreateAlbumWithCover",
    "Page",
]
