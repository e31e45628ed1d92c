"""
Album router.
"""

from typing import Annotated
import uuid

from fastapi import APIRouter, Depends, Form, Query, status
from pydantic import ValidationError as PydanticValidationError

from photohub.application.dto import (
    AlbumResponseDTO,
    CreateAlbumMetadataDTO,
    PageResponseDTO,
    PatchAlbumRequestDTO,
)
from photohub.application.use_cases import (
    CreateAlbumUseCase,
    GetAlbumByIdUseCase,
    ListAlbumsUseCase,
    UpdateAlbumUseCase,
)
from photohub.domain.models.base import ValidationError
from photohub.domain.models.image import UploadImage
from photohub.infrastructure.auth import AuthenticatedUser, get_authenticated_user
from photohub.infrastructure.web.dependencies import (
    get_album_by_id_use_case,
    get_create_album_use_case,
    get_list_albums_use_case,
    get_update_album_use_case,
    read_upload_image,
)

router = APIRouter()

CurrentUser = Annotated[AuthenticatedUser, Depends(get_authenticated_user)]


@router.get("", response_model=PageResponseDTO[AlbumResponseDTO])
async def list_albums(
    user: CurrentUser,
    use_case: Annotated[ListAlbumsUseCase, Depends(get_list_albums_use_case)],
    page: int = Query(0, ge=0),
    per_page: int = Query(ListAlbumsUseCase.DEFAULT_PAGE_SIZE, ge=1, le=100, alias="perPage"),
):
    """List the albums the current user may view."""
    result = await use_case.execute(user, page, per_page)
    return PageResponseDTO[AlbumResponseDTO](
        data=[AlbumResponseDTO.from_domain(album) for album in result.data],
        current_page=result.current_page,
        per_page=result.per_page,
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AlbumResponseDTO)
async def create_album(
    user: CurrentUser,
    use_case: Annotated[CreateAlbumUseCase, Depends(get_create_album_use_case)],
    upload_image: Annotated[UploadImage, Depends(read_upload_image)],
    metadata: str = Form(...),
):
    """
    Create an album with a cover image.

    - **file**: Cover image
    - **metadata**: JSON object with title, description and visibility
    """
    try:
        request = CreateAlbumMetadataDTO.model_validate_json(metadata)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid album metadata: {e.errors()[0]['msg']}", field="metadata")

    album = await use_case.execute(user, request.to_domain(upload_image))
    return AlbumResponseDTO.from_domain(album)


@router.get("/{album_id}", response_model=AlbumResponseDTO)
async def get_album(
    album_id: uuid.UUID,
    user: CurrentUser,
    use_case: Annotated[GetAlbumByIdUseCase, Depends(get_album_by_id_use_case)],
):
    album = await use_case.execute(user, album_id)
    return AlbumResponseDTO.from_domain(album)


@router.patch("/{album_id}", response_model=AlbumResponseDTO)
async def update_album(
    album_id: uuid.UUID,
    request: PatchAlbumRequestDTO,
    user: CurrentUser,
    use_case: Annotated[UpdateAlbumUseCase, Depends(get_update_album_use_case)],
):
    """Edit an album's title or visibility."""
    album = await use_case.execute(user, request.to_domain(album_id))
    return AlbumResponseDTO.from_domain(album)
