"""
Image router.
Serves image bytes after checking download permission.
"""

from typing import Annotated, Optional, Tuple
import uuid

from fastapi import APIRouter, Depends, Query, Response

from photohub.application.use_cases import GetImageReferenceUseCase, GetImageUseCase
from photohub.domain.models.base import ValidationError
from photohub.domain.models.image import ImageTransformOptions
from photohub.infrastructure.auth import AuthenticatedUser, get_authenticated_user
from photohub.infrastructure.web.dependencies import (
    get_image_reference_use_case,
    get_image_use_case,
)

router = APIRouter()

CurrentUser = Annotated[AuthenticatedUser, Depends(get_authenticated_user)]


def parse_thumbnail(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse a WIDTHxHEIGHT thumbnail size."""
    if value is None:
        return None
    width, sep, height = value.lower().partition("x")
    if not sep or not width.isdigit() or not height.isdigit():
        raise ValidationError(f"Invalid thumbnail size: {value}", field="thumbnail")
    return int(width), int(height)


@router.get("/{image_id}")
async def download_image(
    image_id: uuid.UUID,
    user: CurrentUser,
    use_case: Annotated[GetImageUseCase, Depends(get_image_use_case)],
    huerotate: Optional[int] = Query(None, description="Hue rotation in degrees"),
    thumbnail: Optional[str] = Query(None, description="Thumbnail size as WIDTHxHEIGHT"),
):
    """
    Download an image.

    Asking for a transformation requires the Transform permission on top of
    Download and is then refused with 501, since transforms are not applied.
    """
    options = ImageTransformOptions(huerotate=huerotate, thumbnail=parse_thumbnail(thumbnail))
    image = await use_case.execute(user, image_id, options)
    return Response(
        content=image.content,
        media_type=image.format.mime_type,
        headers={"Content-Disposition": f'inline; filename="{image.filename}"'},
    )


@router.get("/{image_id}/metadata")
async def get_image_metadata(
    image_id: uuid.UUID,
    user: CurrentUser,
    use_case: Annotated[GetImageReferenceUseCase, Depends(get_image_reference_use_case)],
):
    reference = await use_case.execute(user, image_id)
    return {
        "id": str(reference.id),
        "url": reference.url,
        "size": reference.size,
        "format": reference.format.value,
        "visibility": reference.visibility.value,
        "createdAt": reference.created_at.isoformat(),
    }
