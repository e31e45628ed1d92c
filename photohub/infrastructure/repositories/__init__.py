"""
Repository implementations.
"""

from .in_memory import (
    InMemoryAlbumRepository,
    InMemoryImageReferenceRepository,
    InMemoryPhotoRepository,
)

__all__ = [
    "InMemoryAlbumRepository",
    "InMemoryImageReferenceRepository",
    "InMemoryPhotoRepository",
]
