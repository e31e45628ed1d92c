from .image_storage import (
    ImageReferenceUrlBuilder,
    ImageStorage,
    ImageStorageError,
    InMemoryImageStorage,
    SupabaseImageStorage,
    create_image_storage,
)

__all__ = [
    "ImageReferenceUrlBuilder",
    "ImageStorage",
    "ImageStorageError",
    "InMemoryImageStorage",
    "SupabaseImageStorage",
    "create_image_storage",
]
