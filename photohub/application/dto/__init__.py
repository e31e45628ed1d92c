"""
Data Transfer Objects for the application layer.
"""

from .base_dto import BaseDTO, PageResponseDTO, RequestDTO, ResponseDTO
from .photo_dto import PatchPhotoRequestDTO, PhotoResponseDTO, UploadPhotoMetadataDTO
from .album_dto import AlbumResponseDTO, CreateAlbumMetadataDTO, PatchAlbumRequestDTO

__all__ = [
    "BaseDTO",
    "PageResponseDTO",
    "RequestDTO",
    "ResponseDTO",
    "PatchPhotoRequestDTO",
    "PhotoResponseDTO",
    "UploadPhotoMetadataDTO",
    "AlbumResponseDTO",
    "CreateAlbumMetadataDTO",
    "PatchAlbumRequestDTO",
]
