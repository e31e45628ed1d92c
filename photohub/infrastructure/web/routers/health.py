"""
Health check router.
"""

from fastapi import APIRouter, Response, status

from photohub.config import settings

router = APIRouter()


@router.get(settings.health_check_path, include_in_schema=False)
async def health_check():
    """Liveness probe. Answers 200 with an empty body."""
    return Response(status_code=status.HTTP_200_OK)
