"""
Photo router.
Lists, reads, uploads and edits photos. Every operation is authorized
against the policy server.
"""

from typing import Annotated
import uuid

from fastapi import APIRouter, Depends, Form, Query, status
from pydantic import ValidationError as PydanticValidationError

from photohub.application.dto import (
    PageResponseDTO,
    PatchPhotoRequestDTO,
    PhotoResponseDTO,
    UploadPhotoMetadataDTO,
)
from photohub.application.use_cases import (
    CreatePhotoUseCase,
    GetPhotoByIdUseCase,
    ListPhotosUseCase,
    UpdatePhotoUseCase,
)
from photohub.domain.models.base import ValidationError
from photohub.domain.models.image import UploadImage
from photohub.infrastructure.auth import AuthenticatedUser, get_authenticated_user
from photohub.infrastructure.web.dependencies import (
    get_create_photo_use_case,
    get_list_photos_use_case,
    get_photo_by_id_use_case,
    get_update_photo_use_case,
    read_upload_image,
)

router = APIRouter()

CurrentUser = Annotated[AuthenticatedUser, Depends(get_authenticated_user)]


@router.get("", response_model=PageResponseDTO[PhotoResponseDTO])
async def list_photos(
    user: CurrentUser,
    use_case: Annotated[ListPhotosUseCase, Depends(get_list_photos_use_case)],
    page: int = Query(0, ge=0),
    per_page: int = Query(ListPhotosUseCase.DEFAULT_PAGE_SIZE, ge=1, le=100, alias="perPage"),
):
    """
    List the photos the current user may view.

    - **page**: Zero based page number
    - **perPage**: Page size
    """
    result = await use_case.execute(user, page, per_page)
    return PageResponseDTO[PhotoResponseDTO](
        data=[PhotoResponseDTO.from_domain(photo) for photo in result.data],
        current_page=result.current_page,
        per_page=result.per_page,
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PhotoResponseDTO)
async def upload_photo(
    user: CurrentUser,
    use_case: Annotated[CreatePhotoUseCase, Depends(get_create_photo_use_case)],
    upload_image: Annotated[UploadImage, Depends(read_upload_image)],
    metadata: str = Form(...),
):
    """
    Upload a photo.

    - **file**: PNG, JPEG or GIF image
    - **metadata**: JSON object with title, description, category, tags, visibility and albumId
    """
    try:
        request = UploadPhotoMetadataDTO.model_validate_json(metadata)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid photo metadata: {e.errors()[0]['msg']}", field="metadata")

    photo = await use_case.execute(user, request.to_domain(upload_image))
    return PhotoResponseDTO.from_domain(photo)


@router.get("/{photo_id}", response_model=PhotoResponseDTO)
async def get_photo(
    photo_id: uuid.UUID,
    user: CurrentUser,
    use_case: Annotated[GetPhotoByIdUseCase, Depends(get_photo_by_id_use_case)],
):
    """Get a photo by id."""
    photo = await use_case.execute(user, photo_id)
    return PhotoResponseDTO.from_domain(photo)


@router.patch("/{photo_id}", response_model=PhotoResponseDTO)
async def update_photo(
    photo_id: uuid.UUID,
    request: PatchPhotoRequestDTO,
    user: CurrentUser,
    use_case: Annotated[UpdatePhotoUseCase, Depends(get_update_photo_use_case)],
):
    """
    Edit a photo. Each supplied field needs its own permission.

    - **title**: New title
    - **albumId**: Album to move the photo to
    - **visibility**: Public or Private
    """
    photo = await use_case.execute(user, request.to_domain(photo_id))
    return PhotoResponseDTO.from_domain(photo)
