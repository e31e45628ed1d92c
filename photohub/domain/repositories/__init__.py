"""
Repository interfaces for the domain layer.
"""

from .photo_repository import PhotoRepository
from .album_repository import AlbumRepository
from .image_reference_repository import ImageReferenceRepository

__all__ = [
    "PhotoRepository",
    "AlbumRepository",
    "ImageReferenceRepository",
]
